"""Durable local storage for relcrm profiles."""

from relcrm.storage.local_store import LocalStore

__all__ = ["LocalStore"]
