"""Record Cache Implementations.

Provides concrete implementations of the RecordCache interface: a persistent
SQLite store, an in-memory store for tests and one-shot runs, and a no-op
store for talking to the API directly.
Bounded Context: Cache Management
"""
