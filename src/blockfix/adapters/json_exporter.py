"""JSON export of a check run.

Lets operators keep the evidence of what was evicted, independently of
the terminal output.
"""

from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path

from blockfix.core.domain.models import CheckResult


def export_check_json(*, result: CheckResult, chain: str, selector: str, output_path: Path) -> Path:
    """Export `CheckResult` as UTF-8 JSON with a stable layout."""

    output_path.parent.mkdir(parents=True, exist_ok=True)
    payload = {
        "chain": chain,
        "selector": selector,
        "generated_at": datetime.now(timezone.utc).isoformat(),
        **result.model_dump(mode="json"),
    }
    output_path.write_text(
        json.dumps(payload, ensure_ascii=False, indent=2, sort_keys=True) + "\n",
        encoding="utf-8",
    )
    return output_path
