"""Core configuration.

Why here:
- Reads environment variables (pydantic-settings) with the `BLOCKFIX_` prefix.
- Looks for a project `.env` first, then the per-user config `.env`.
- Adapters (store, JSON-RPC client) and the CLI read the same `AppSettings`.
"""

from __future__ import annotations

import os
import sys
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


def get_user_config_dir() -> Path:
    """Per-user configuration directory (cross-platform, no dependencies)."""

    if sys.platform.startswith("win"):
        base = Path(os.environ.get("APPDATA", str(Path.home())))
        return base / "blockfix"
    if sys.platform == "darwin":
        return Path.home() / "Library" / "Application Support" / "blockfix"

    xdg = os.environ.get("XDG_CONFIG_HOME")
    if xdg:
        return Path(xdg) / "blockfix"
    return Path.home() / ".config" / "blockfix"


def get_user_env_file() -> Path:
    return get_user_config_dir() / ".env"


def _parse_env_lines(text: str) -> dict[str, str]:
    data: dict[str, str] = {}
    for raw_line in text.splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        if "=" not in line:
            continue
        key, value = line.split("=", 1)
        key = key.strip()
        value = value.strip().strip('"').strip("'")
        if key:
            data[key] = value
    return data


def write_user_env_vars(values: dict[str, str], *, env_path: Path | None = None) -> Path:
    """Write or update variables in the user's global `.env`."""

    env_path = env_path or get_user_env_file()
    env_path.parent.mkdir(parents=True, exist_ok=True)

    existing: dict[str, str] = {}
    if env_path.exists():
        existing = _parse_env_lines(env_path.read_text(encoding="utf-8"))

    existing.update({k: v for k, v in values.items() if v is not None})

    lines = ["# blockfix user config (.env)"]
    for key in sorted(existing.keys()):
        lines.append(f"{key}={existing[key]}")
    env_path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return env_path


class AppSettings(BaseSettings):
    """Central application settings."""

    model_config = SettingsConfigDict(
        env_prefix="BLOCKFIX_",
        extra="ignore",
        case_sensitive=False,
        # Project `.env` first (development), then the user-wide one.
        env_file=(".env", str(get_user_env_file())),
        env_file_encoding="utf-8",
    )

    chain: str = Field(
        default="mainnet",
        min_length=1,
        max_length=64,
        description="Name of the chain whose block cache is inspected.",
    )
    rpc_url: str = Field(
        default="http://localhost:8545",
        min_length=8,
        description="JSON-RPC endpoint treated as the source of truth.",
    )
    rpc_timeout_seconds: float = Field(
        default=30.0,
        gt=0,
        description="Timeout per JSON-RPC request (seconds).",
    )
    store_path: Path = Field(
        default=Path("data/blocks.sqlite"),
        description="SQLite database holding the block cache.",
    )
    fetch_max_concurrency: int = Field(
        default=8,
        ge=1,
        le=256,
        description="Maximum number of blocks fetched from the provider at once.",
    )
    user_agent: str = Field(
        default="blockfix/0.1",
        min_length=1,
        description="User-Agent sent to the JSON-RPC provider.",
    )
