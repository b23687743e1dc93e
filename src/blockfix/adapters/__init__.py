"""Adapters: concrete I/O (SQLite block store, JSON-RPC over httpx, exports)."""
