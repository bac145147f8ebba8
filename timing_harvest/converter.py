from __future__ import annotations

import csv
from dataclasses import dataclass, field
from pathlib import Path
from typing import IO, Any, Iterable, Iterator, Optional

from timing_harvest.columns import ColumnPlan, ResolvedPlan, build_plan
from timing_harvest.loader import iter_rows
from timing_harvest.transforms import (
    ConversionError,
    DurationFormat,
    DurationTransform,
    mark_notes,
    split_project,
    transform_date,
)

PROJECT_SEPARATOR = "▸"
# identifies hours that were imported from Timing
NOTES_MARKER = "[T]"


@dataclass(frozen=True)
class ConversionConfig:
    first_name: str
    last_name: str
    separator: str = PROJECT_SEPARATOR
    marker: str = NOTES_MARKER


@dataclass
class ConversionStats:
    rows_read: int = 0
    rows_written: int = 0
    duration_format: Optional[DurationFormat] = None
    coerced_durations: int = 0
    detected_format: Optional[str] = None
    detected_encoding: Optional[str] = None
    warnings: list[str] = field(default_factory=list)

    def as_metrics(self) -> dict[str, Any]:
        return {
            "detected_format": self.detected_format,
            "detected_encoding": self.detected_encoding,
            "rows_read": self.rows_read,
            "rows_written": self.rows_written,
            "data_rows": max(self.rows_written - 1, 0),
            "duration_format": self.duration_format.value if self.duration_format else None,
            "coerced_durations": self.coerced_durations,
        }


class RowTransformer:
    """Turns the Timing header row and data rows into Harvest rows."""

    def __init__(self, config: ConversionConfig) -> None:
        self.config = config
        self.plan: ColumnPlan = build_plan(config)
        self.resolved: ResolvedPlan | None = None
        self.duration = DurationTransform()

    def header(self, row: list) -> list:
        if self.resolved is not None:
            raise ConversionError("Header row has already been processed")
        self.resolved = self.plan.resolve(list(row[1:]))
        return list(self.resolved.header)

    def transform(self, row: list) -> list:
        if self.resolved is None:
            raise ConversionError("Data row received before the header row")
        cols = self.resolved.columns
        out = self.resolved.apply(list(row[1:]))

        out[cols.duration] = self.duration(out[cols.duration])
        out[cols.date] = transform_date(out[cols.date])
        out[cols.client], out[cols.project] = split_project(out[cols.project], self.config.separator)
        out[cols.notes] = mark_notes(out[cols.notes], self.config.marker)
        return out


def convert_rows(
    rows: Iterable[list],
    config: ConversionConfig,
    transformer: RowTransformer | None = None,
) -> Iterator[list]:
    transformer = transformer or RowTransformer(config)
    for row_number, row in enumerate(rows, start=1):
        try:
            if row_number == 1:
                yield transformer.header(row)
            else:
                yield transformer.transform(row)
        except ConversionError as exc:
            if exc.row_number is None:
                exc.row_number = row_number
            raise
        except IndexError as exc:
            raise ConversionError(f"Row is shorter than the header ({len(row)} cells)", row_number) from exc


def write_csv(rows: Iterable[list], stream: IO[str]) -> int:
    writer = csv.writer(stream, lineterminator="\n")
    written = 0
    for row in rows:
        writer.writerow(["" if value is None else value for value in row])
        stream.flush()
        written += 1
    return written


def convert_file(
    path: Path,
    config: ConversionConfig,
    output: IO[str],
    *,
    encoding: str | None = None,
    stats: ConversionStats | None = None,
) -> ConversionStats:
    """
    Stream a Timing export at ``path`` into Harvest CSV on ``output``.

    Rows are written as soon as they are converted. When a row fails, the
    rows before it have already been written and the ConversionError
    propagates with the 1-based input row number attached. Pass ``stats`` to
    keep partial counts when that happens.
    """
    stats = stats if stats is not None else ConversionStats()
    transformer = RowTransformer(config)

    def counted(source: Iterable[list]) -> Iterator[list]:
        for row in source:
            stats.rows_read += 1
            yield row

    def tracked(source: Iterable[list]) -> Iterator[list]:
        for row in source:
            yield row
            stats.rows_written += 1

    meta: dict[str, Any] = {}
    source = iter_rows(path, encoding=encoding, meta=meta)
    try:
        write_csv(tracked(convert_rows(counted(source), config, transformer)), output)
    finally:
        stats.duration_format = transformer.duration.format
        stats.coerced_durations = len(transformer.duration.coerced)
        stats.detected_format = meta.get("detected_format")
        stats.detected_encoding = meta.get("detected_encoding")

    if stats.rows_read == 0:
        stats.warnings.append("Export is empty; nothing was converted")
    elif stats.rows_read == 1:
        stats.warnings.append("Export only contains a header row")
    coerced = transformer.duration.coerced
    if coerced:
        sample = ", ".join(repr(value) for value in coerced[:3])
        extra = f" (+{len(coerced) - 3} more)" if len(coerced) > 3 else ""
        stats.warnings.append(
            f"{len(coerced)} duration values were not plain seconds and were read "
            f"from their leading number: {sample}{extra}"
        )
    return stats
