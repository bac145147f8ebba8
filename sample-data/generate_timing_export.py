#!/usr/bin/env python3
"""
Generates sample-data/timing_export.csv, a small Timing export for trying out
timing-harvest and for the CLI tests.

Run from the repo root:
    python sample-data/generate_timing_export.py

What is in it:
  - Leading "Id" column (dropped by the converter)
  - "End Date" column (dropped by the converter)
  - Durations in decimal seconds
  - Two-level and three-level "Client ▸ Project" hierarchies plus a flat project
  - One empty Notes cell and one Notes cell containing a comma
  - Start dates with a negative UTC offset that must not roll over to the next day
"""

import csv
from pathlib import Path

OUTPUT = Path(__file__).parent / "timing_export.csv"

HEADERS = ["Id", "Day", "Start Date", "End Date", "Duration", "Project", "Task Title", "Notes"]

ROWS = [
    ["1", "2018-05-01", "2018-05-01T09:00:00+02:00", "2018-05-01T10:00:00+02:00", "3600",
     "Acme ▸ Website Redesign", "Kickoff", "Met with client"],
    ["2", "2018-05-01", "2018-05-01T13:00:00+02:00", "2018-05-01T15:00:00+02:00", "7200",
     "Acme ▸ Website Redesign", "Wireframes", ""],
    ["3", "2018-05-02", "2018-05-02T08:30:00+02:00", "2018-05-02T09:15:00+02:00", "2700",
     "Solo", "Admin", "Invoices, receipts"],
    ["4", "2018-05-02", "2018-05-02T23:30:00-07:00", "2018-05-03T00:30:00-07:00", "3600",
     "Globex ▸ Mobile ▸ iOS App", "Release", "Late deploy"],
]

with OUTPUT.open("w", encoding="utf-8", newline="") as handle:
    writer = csv.writer(handle, lineterminator="\n")
    writer.writerow(HEADERS)
    writer.writerows(ROWS)

print(f"Written: {OUTPUT}")
