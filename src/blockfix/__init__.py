"""blockfix: check a block cache against a JSON-RPC provider and evict stale blocks."""

__version__ = "0.1.0"
