"""Write result rows to disk."""

import csv
import json
from typing import List

FORMATS = ("json", "csv")


def export_rows(rows: List[dict], path: str, fmt: str = "json") -> None:
    """
    Write ``rows`` as a JSON array or as CSV with the first row's keys as header.

    An empty CSV export still creates the file, without a header.
    """
    if fmt not in FORMATS:
        raise ValueError(f"Unsupported export format: {fmt}")
    with open(path, "w", newline="", encoding="utf-8") as handle:
        if fmt == "json":
            json.dump(rows, handle, indent=2)
        elif rows:
            writer = csv.DictWriter(handle, fieldnames=list(rows[0]))
            writer.writeheader()
            writer.writerows(rows)
