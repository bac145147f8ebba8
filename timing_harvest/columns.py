"""
columns.py — Column-edit plan shared by the header row and every data row.

The Timing export is reshaped by a short list of edits (drop End Date, append
Client / First name / Last name). The plan is resolved once against the header
row; the resolved plan then replays the identical positional edits on each
data row, so the header and the data can never drift apart.

Public API:
    plan     = build_plan(config)
    resolved = plan.resolve(header_row)      # header row, leading cell removed
    resolved.header                          # rewritten header
    resolved.columns.duration                # index in the output row shape
    resolved.apply(data_row)                 # data row, leading cell removed
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Union

from timing_harvest.transforms import MissingColumnsError

if TYPE_CHECKING:
    from timing_harvest.converter import ConversionConfig


START_DATE = "Start Date"
END_DATE = "End Date"
DURATION = "Duration"
PROJECT = "Project"
TASK_TITLE = "Task Title"
NOTES = "Notes"
CLIENT = "Client"
FIRST_NAME = "First name"
LAST_NAME = "Last name"

REQUIRED_HEADERS = (START_DATE, END_DATE, DURATION, PROJECT, TASK_TITLE, NOTES)

HEADER_RENAMES = {
    START_DATE: "Date",
    DURATION: "Hours",
    TASK_TITLE: "Task",
}


@dataclass(frozen=True)
class DropColumn:
    header: str


@dataclass(frozen=True)
class AppendColumn:
    header: str
    value: Any = None


ColumnEdit = Union[DropColumn, AppendColumn]


@dataclass(frozen=True)
class ColumnMap:
    duration: int
    date: int
    end_date: int
    client: int
    project: int
    task: int
    notes: int


@dataclass(frozen=True)
class ResolvedPlan:
    header: list
    columns: ColumnMap
    # ("drop", index) or ("append", value), in plan order
    steps: tuple

    def apply(self, row: list) -> list:
        edited = list(row)
        for kind, arg in self.steps:
            if kind == "drop":
                del edited[arg]
            else:
                edited.append(arg)
        return edited


@dataclass(frozen=True)
class ColumnPlan:
    edits: tuple

    def resolve(self, header: list) -> ResolvedPlan:
        missing = [name for name in REQUIRED_HEADERS if name not in header]
        if missing:
            raise MissingColumnsError(missing)

        edited = list(header)
        steps = []
        dropped: dict[str, int] = {}
        for edit in self.edits:
            if isinstance(edit, DropColumn):
                index = edited.index(edit.header)
                dropped[edit.header] = index
                del edited[index]
                steps.append(("drop", index))
            else:
                edited.append(edit.header)
                steps.append(("append", edit.value))

        columns = ColumnMap(
            duration=edited.index(DURATION),
            date=edited.index(START_DATE),
            end_date=dropped[END_DATE],
            client=edited.index(CLIENT),
            project=edited.index(PROJECT),
            task=edited.index(TASK_TITLE),
            notes=edited.index(NOTES),
        )
        for original, renamed in HEADER_RENAMES.items():
            edited[edited.index(original)] = renamed

        return ResolvedPlan(header=edited, columns=columns, steps=tuple(steps))


def build_plan(config: ConversionConfig) -> ColumnPlan:
    return ColumnPlan(
        edits=(
            DropColumn(END_DATE),
            AppendColumn(CLIENT),
            AppendColumn(FIRST_NAME, config.first_name),
            AppendColumn(LAST_NAME, config.last_name),
        )
    )
