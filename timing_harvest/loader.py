"""
loader.py — Row reader for Timing exports

Supports: .csv .txt (comma-separated) and .xlsx .xlsm (first sheet)

Public API:
    for row in iter_rows("path/to/export.csv"):
        ...

Rows are plain lists. Text cells come back as str, empty cells as None.
Spreadsheet cells keep their native Python type (datetime, float, ...).
"""

from __future__ import annotations

import csv
import io
from pathlib import Path
from typing import Any, Iterator, Optional

import chardet
import pandas as pd

# ── Format groups ──────────────────────────────────────────────────────────────
TEXT_FORMATS  = {".csv", ".txt"}
EXCEL_FORMATS = {".xlsx", ".xlsm"}
ALL_FORMATS   = TEXT_FORMATS | EXCEL_FORMATS

DEFAULT_CHUNKSIZE = 500


# ══════════════════════════════════════════════════════════════════════════════
# ENCODING DETECTION
# ══════════════════════════════════════════════════════════════════════════════

def detect_encoding(raw: bytes) -> dict:
    """
    Detect encoding from raw bytes.

    Returns dict with: detected, confidence, is_utf8.
    """
    result     = chardet.detect(raw)
    detected   = result.get("encoding") or "unknown"
    confidence = round(result.get("confidence") or 0.0, 2)
    is_utf8    = detected.upper().replace("-", "").replace("SIG", "") in ("UTF8", "ASCII")
    return {
        "detected":   detected,
        "confidence": confidence,
        "is_utf8":    is_utf8,
    }


def decode_text(raw: bytes, preferred_encoding: str) -> str:
    """
    Decode raw bytes line-by-line.

    Strategy per line:
      1. Try UTF-8
      2. Try preferred_encoding
      3. Try latin-1
      4. CP1252 with replace (never crashes)

    Null bytes and a leading byte-order mark are stripped.
    """
    decoded_lines: list[str] = []
    for raw_line in raw.split(b"\n"):
        decoded: str | None = None
        for enc in ("utf-8", preferred_encoding, "latin-1"):
            if not enc or enc == "unknown":
                continue
            try:
                decoded = raw_line.decode(enc)
                break
            except (LookupError, UnicodeDecodeError):
                continue
        if decoded is None:
            decoded = raw_line.decode("cp1252", errors="replace")
        decoded_lines.append(decoded.replace("\x00", ""))
    return "\n".join(decoded_lines).lstrip("\ufeff")


def _cell(value: Any) -> Any:
    if value is None:
        return None
    if isinstance(value, float) and pd.isna(value):
        return None
    if isinstance(value, str) and value == "":
        return None
    return value


# ══════════════════════════════════════════════════════════════════════════════
# FORMAT READERS
# ══════════════════════════════════════════════════════════════════════════════

def _iter_text_rows(path: Path, encoding: Optional[str], chunksize: int, meta: dict) -> Iterator[list]:
    raw = path.read_bytes()
    if encoding is None:
        enc_info = detect_encoding(raw)
        encoding = enc_info["detected"] if enc_info["detected"] != "unknown" else "utf-8"
    meta["detected_encoding"] = encoding
    text = decode_text(raw, encoding)
    if not text.strip():
        return

    # Ragged exports are widened to the longest row; short rows pad with None.
    width = max((len(row) for row in csv.reader(io.StringIO(text))), default=0)

    try:
        reader = pd.read_csv(
            io.StringIO(text),
            header=None,
            names=list(range(width)),
            dtype=str,
            keep_default_na=False,
            sep=",",
            engine="python",
            chunksize=chunksize,
        )
    except Exception as exc:
        raise ValueError(f"Could not parse {path.suffix} file: {exc}") from exc

    with reader:
        for chunk in reader:
            for values in chunk.itertuples(index=False, name=None):
                yield [_cell(value) for value in values]


def _iter_excel_rows(path: Path) -> Iterator[list]:
    import openpyxl

    try:
        workbook = openpyxl.load_workbook(path, read_only=True, data_only=True)
    except Exception as exc:
        raise ValueError(f"Could not open workbook: {exc}") from exc

    try:
        sheet = workbook.worksheets[0]
        for values in sheet.iter_rows(values_only=True):
            row = [_cell(value) for value in values]
            if any(value is not None for value in row):
                yield row
    finally:
        workbook.close()


# ══════════════════════════════════════════════════════════════════════════════
# PUBLIC API
# ══════════════════════════════════════════════════════════════════════════════

def iter_rows(
    path: "str | Path",
    encoding: Optional[str] = None,
    chunksize: int = DEFAULT_CHUNKSIZE,
    meta: Optional[dict] = None,
) -> Iterator[list]:
    """
    Yield every row of a Timing export, header row first.

    Args:
        path:      Path to the export (str or Path).
        encoding:  Force a text encoding instead of detecting it.
        chunksize: Rows parsed per pandas chunk for text exports.
        meta:      Optional dict filled with detected_format and, for text
                   exports, detected_encoding once reading starts.

    Raises:
        FileNotFoundError  if the file does not exist.
        ValueError         if the format is unsupported or unreadable.
    """
    path   = Path(path)
    suffix = path.suffix.lower()

    if not path.exists():
        raise FileNotFoundError(f"Could not find file at: {path.resolve()}")

    if suffix not in ALL_FORMATS:
        supported = ", ".join(sorted(ALL_FORMATS))
        raise ValueError(
            f"Unsupported format '{suffix or '[missing extension]'}'. Supported: {supported}"
        )

    meta = meta if meta is not None else {}
    meta["detected_format"] = suffix.lstrip(".")
    meta["detected_encoding"] = None

    if suffix in EXCEL_FORMATS:
        return _iter_excel_rows(path)
    return _iter_text_rows(path, encoding, chunksize, meta)
