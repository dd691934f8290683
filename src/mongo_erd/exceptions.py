"""Exceptions raised by mongo_erd."""

from __future__ import annotations


class ErdError(Exception):
    """Base class for all mongo_erd errors."""


class ConnectivityError(ErdError):
    """The database cannot be reached or authentication failed."""


class SamplingError(ErdError):
    """Fetching the document sample of a collection failed."""

    def __init__(self, collection: str, message: str):
        super().__init__(f"Could not sample collection '{collection}': {message}")
        self.collection = collection


class ConfigError(ErdError):
    """Invalid configuration value or config file."""
