from __future__ import annotations

import sys
import unittest
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT))

from timing_harvest.columns import AppendColumn, ColumnMap, DropColumn, build_plan
from timing_harvest.converter import ConversionConfig
from timing_harvest.transforms import MissingColumnsError

CONFIG = ConversionConfig(first_name="Ada", last_name="Lovelace")
TIMING_HEADER = ["Day", "Start Date", "End Date", "Duration", "Project", "Task Title", "Notes"]


class ColumnPlanTests(unittest.TestCase):
    def test_plan_lists_edits_in_order(self):
        plan = build_plan(CONFIG)
        self.assertEqual(
            plan.edits,
            (
                DropColumn("End Date"),
                AppendColumn("Client"),
                AppendColumn("First name", "Ada"),
                AppendColumn("Last name", "Lovelace"),
            ),
        )

    def test_header_is_rewritten(self):
        resolved = build_plan(CONFIG).resolve(TIMING_HEADER)
        self.assertEqual(
            resolved.header,
            ["Day", "Date", "Hours", "Project", "Task", "Notes", "Client", "First name", "Last name"],
        )
        self.assertEqual(
            resolved.columns,
            ColumnMap(duration=2, date=1, end_date=2, client=6, project=3, task=4, notes=5),
        )

    def test_header_order_does_not_matter(self):
        header = ["Notes", "Duration", "End Date", "Task Title", "Project", "Start Date"]
        resolved = build_plan(CONFIG).resolve(header)
        self.assertEqual(
            resolved.header,
            ["Notes", "Hours", "Task", "Project", "Date", "Client", "First name", "Last name"],
        )
        self.assertEqual(resolved.header[-3:], ["Client", "First name", "Last name"])
        self.assertEqual(resolved.columns.end_date, 2)
        self.assertEqual(resolved.columns.date, 4)

    def test_data_rows_get_the_same_positional_edits(self):
        header = ["Notes", "Duration", "End Date", "Task Title", "Project", "Start Date"]
        resolved = build_plan(CONFIG).resolve(header)
        row = resolved.apply(["n", "60", "end", "t", "p", "s"])
        self.assertEqual(row, ["n", "60", "t", "p", "s", None, "Ada", "Lovelace"])
        self.assertEqual(len(row), len(resolved.header))

    def test_apply_does_not_mutate_input(self):
        resolved = build_plan(CONFIG).resolve(TIMING_HEADER)
        row = ["d", "s", "e", "60", "p", "t", "n"]
        resolved.apply(row)
        self.assertEqual(row, ["d", "s", "e", "60", "p", "t", "n"])

    def test_missing_columns_fail_fast(self):
        with self.assertRaises(MissingColumnsError) as ctx:
            build_plan(CONFIG).resolve(["Day", "Start Date", "Duration", "Project"])
        self.assertEqual(ctx.exception.missing, ["End Date", "Task Title", "Notes"])
        self.assertIn("End Date, Task Title, Notes", str(ctx.exception))


if __name__ == "__main__":
    unittest.main()
