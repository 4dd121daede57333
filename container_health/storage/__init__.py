"""Durable storage — SQLite latest-state table and history log."""

from .store import ConnectionPool, HealthStore, StoreUnavailable
