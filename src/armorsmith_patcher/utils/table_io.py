"""CSV table helpers shared by the taxonomy, override and report code."""
import csv
import io
from pathlib import Path
from typing import Dict, Iterable, List, Mapping, Optional, Sequence


def read_table(path: Path, required_columns: Optional[Sequence[str]] = None) -> List[Dict[str, str]]:
    """Read a headed CSV file into a list of row dictionaries.

    Blank cells are dropped from each row so that callers can treat a
    missing key as "no value". Completely empty lines are skipped.

    Args:
        path: CSV file to read
        required_columns: Columns that must appear in the header row

    Returns:
        Rows keyed by header name

    Raises:
        OSError: If the file cannot be read
        ValueError: If the header is missing or lacks a required column
    """
    text = path.read_text(encoding="utf-8-sig")
    reader = csv.DictReader(io.StringIO(text))

    if not reader.fieldnames:
        raise ValueError(f"No header row in {path.name}")

    header = [name.strip() for name in reader.fieldnames]
    reader.fieldnames = header

    missing = [column for column in (required_columns or []) if column not in header]
    if missing:
        raise ValueError(f"{path.name} is missing columns: {', '.join(missing)}")

    rows = []
    for raw_row in reader:
        row = {}
        for key, value in raw_row.items():
            # Extra cells beyond the header land under the None key
            if key is None or value is None:
                continue
            value = value.strip()
            if value:
                row[key] = value
        if row:
            rows.append(row)

    return rows


def write_table(path: Path, rows: Iterable[Mapping[str, object]]) -> int:
    """Write row dictionaries to a CSV file with sorted headings.

    Returns:
        Number of data rows written
    """
    rows = list(rows)
    headings = sorted({heading for row in rows for heading in row})

    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, 'w', encoding='utf-8', newline='') as f:
        writer = csv.DictWriter(f, fieldnames=headings, lineterminator='\r\n')
        writer.writeheader()
        for row in rows:
            writer.writerow({key: value for key, value in row.items() if value is not None})

    return len(rows)
