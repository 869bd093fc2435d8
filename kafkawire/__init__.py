"""Kafka wire protocol requests, responses and message-set codecs."""

__version__ = "0.1.0"