"""SQLite-backed block cache.

Tables:
- `blocks(chain, hash, number, parent_hash, data)`, keyed by (chain, hash).
- `chain_heads(chain, head_number, head_hash)`.

Hashes are `0x` hex and compare case-insensitively; other writers may
store them upper-cased. `data` holds the block as JSON text. Some writers
store an envelope `{"block": {...}, "transaction_receipts": [...]}`;
reads return the inner block document so it compares with what the
provider serves.
"""

from __future__ import annotations

import json
import sqlite3
import threading
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Iterator, Sequence

from blockfix.core.domain.models import BlockHash
from blockfix.core.errors import StoreError


def _utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _chunked(values: Sequence[Any], size: int) -> Iterator[list[Any]]:
    batch: list[Any] = []
    for value in values:
        batch.append(value)
        if len(batch) >= size:
            yield batch
            batch = []
    if batch:
        yield batch


def _unwrap(data: str, *, block_hash: BlockHash, chain: str) -> Any:
    try:
        document = json.loads(data)
    except (TypeError, ValueError) as exc:
        raise StoreError(f"Cached block {block_hash} for {chain} is not valid JSON: {exc}") from exc
    if isinstance(document, dict) and isinstance(document.get("block"), dict):
        return document["block"]
    return document


class SQLiteBlockStore:
    """Implements `BlockStore` for one chain of a SQLite block cache."""

    def __init__(self, db_path: Path | str, chain: str) -> None:
        self.db_path = Path(db_path)
        self.chain = chain
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._lock = threading.Lock()
        try:
            self._conn = sqlite3.connect(self.db_path, check_same_thread=False)
            self._conn.execute("PRAGMA journal_mode=WAL")
            self._conn.execute("PRAGMA synchronous=NORMAL")
            self._conn.execute("PRAGMA busy_timeout=5000")
            self._conn.execute(
                """
                CREATE TABLE IF NOT EXISTS blocks (
                    chain TEXT NOT NULL,
                    hash TEXT NOT NULL COLLATE NOCASE,
                    number INTEGER NOT NULL,
                    parent_hash TEXT,
                    data TEXT NOT NULL,
                    updated_at TEXT,
                    PRIMARY KEY (chain, hash)
                )
                """
            )
            self._conn.execute(
                "CREATE INDEX IF NOT EXISTS blocks_chain_number ON blocks (chain, number)"
            )
            self._conn.execute(
                """
                CREATE TABLE IF NOT EXISTS chain_heads (
                    chain TEXT PRIMARY KEY,
                    head_number INTEGER NOT NULL,
                    head_hash TEXT
                )
                """
            )
            self._conn.commit()
        except sqlite3.Error as exc:
            raise StoreError(f"Cannot open block store {self.db_path}: {exc}") from exc

    def close(self) -> None:
        with self._lock:
            self._conn.close()

    def __enter__(self) -> "SQLiteBlockStore":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def _query(self, sql: str, params: Sequence[Any]) -> list[tuple]:
        try:
            with self._lock:
                return self._conn.execute(sql, params).fetchall()
        except sqlite3.Error as exc:
            raise StoreError(f"Block store query failed for {self.chain}: {exc}") from exc

    def lookup_by_hash(self, block_hash: BlockHash) -> list[Any]:
        rows = self._query(
            "SELECT data FROM blocks WHERE chain = ? AND hash = ? COLLATE NOCASE",
            (self.chain, block_hash.hex()),
        )
        return [_unwrap(row[0], block_hash=block_hash, chain=self.chain) for row in rows]

    def lookup_hashes_by_number(self, number: int) -> list[BlockHash]:
        rows = self._query(
            "SELECT hash FROM blocks WHERE chain = ? AND number = ? ORDER BY hash",
            (self.chain, number),
        )
        return [BlockHash.from_hex(row[0]) for row in rows]

    def chain_head_number(self) -> int | None:
        rows = self._query(
            "SELECT head_number FROM chain_heads WHERE chain = ?",
            (self.chain,),
        )
        return rows[0][0] if rows else None

    def count_blocks(self) -> int:
        rows = self._query("SELECT COUNT(*) FROM blocks WHERE chain = ?", (self.chain,))
        return int(rows[0][0])

    def delete(self, hashes: Sequence[BlockHash]) -> None:
        if not hashes:
            return
        try:
            with self._lock:
                for batch in _chunked([h.hex() for h in hashes], 500):
                    placeholders = ",".join("?" for _ in batch)
                    self._conn.execute(
                        f"DELETE FROM blocks WHERE chain = ? AND hash COLLATE NOCASE IN ({placeholders})",
                        (self.chain, *batch),
                    )
                self._conn.commit()
        except sqlite3.Error as exc:
            raise StoreError(f"Failed to delete cached blocks for {self.chain}: {exc}") from exc

    def truncate_all(self) -> None:
        try:
            with self._lock:
                self._conn.execute("DELETE FROM blocks WHERE chain = ?", (self.chain,))
                self._conn.commit()
        except sqlite3.Error as exc:
            raise StoreError(f"Failed to truncate block cache for {self.chain}: {exc}") from exc

    def put_block(
        self,
        block_hash: BlockHash,
        number: int,
        data: Any,
        *,
        parent_hash: BlockHash | None = None,
    ) -> None:
        """Insert or replace a cached block document."""

        payload = json.dumps(data, ensure_ascii=False)
        try:
            with self._lock:
                self._conn.execute(
                    """
                    INSERT INTO blocks (chain, hash, number, parent_hash, data, updated_at)
                    VALUES (?, ?, ?, ?, ?, ?)
                    ON CONFLICT(chain, hash) DO UPDATE SET
                        number=excluded.number,
                        parent_hash=excluded.parent_hash,
                        data=excluded.data,
                        updated_at=excluded.updated_at
                    """,
                    (
                        self.chain,
                        block_hash.hex(),
                        number,
                        parent_hash.hex() if parent_hash else None,
                        payload,
                        _utc_now_iso(),
                    ),
                )
                self._conn.commit()
        except sqlite3.Error as exc:
            raise StoreError(f"Failed to store block {block_hash} for {self.chain}: {exc}") from exc

    def set_chain_head(self, number: int, block_hash: BlockHash | None = None) -> None:
        try:
            with self._lock:
                self._conn.execute(
                    """
                    INSERT INTO chain_heads (chain, head_number, head_hash)
                    VALUES (?, ?, ?)
                    ON CONFLICT(chain) DO UPDATE SET
                        head_number=excluded.head_number,
                        head_hash=excluded.head_hash
                    """,
                    (self.chain, number, block_hash.hex() if block_hash else None),
                )
                self._conn.commit()
        except sqlite3.Error as exc:
            raise StoreError(f"Failed to set chain head for {self.chain}: {exc}") from exc
