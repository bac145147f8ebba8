"""Versioned contract for the JSON run summary written next to a conversion."""

from __future__ import annotations

import os
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

CONTRACT_VERSIONS = {
    "timing_harvest.convert_summary": "1.0.0",
}

STAMP_ENV_VAR = "TIMING_HARVEST_SUMMARY_STAMP"


def utc_now_iso() -> str:
    override = os.environ.get(STAMP_ENV_VAR)
    if override:
        return override
    return datetime.now(timezone.utc).replace(microsecond=0).isoformat().replace("+00:00", "Z")


def build_contract(name: str) -> dict[str, str]:
    version = CONTRACT_VERSIONS[name]
    return {"name": name, "version": version}


def build_run_summary(
    *,
    tool: str,
    script: str,
    input_path: Path,
    status: str = "ok",
    output_path: Path | None = None,
    metrics: dict[str, Any] | None = None,
    warnings: list[str] | None = None,
    error: str | None = None,
) -> dict[str, Any]:
    summary = {
        "contract": build_contract("timing_harvest.convert_summary"),
        "tool": tool,
        "script": script,
        "status": status,
        "generated_at": utc_now_iso(),
        "input_file": str(input_path),
        "output_file": str(output_path) if output_path else None,
        "warnings_count": len(warnings or []),
        "warnings": list(warnings or []),
        "metrics": metrics or {},
    }
    if error is not None:
        summary["error"] = error
    return summary
