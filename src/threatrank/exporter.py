"""
ThreatRank exporters - render a ranking as a table, CSV, JSON, Excel or report.

Row content and order come straight from the ranking; these functions only
format it.
"""

import csv
import json
from pathlib import Path
from typing import TextIO

from .models import RankedContact, RunResult

# Column order (stable schema - derived from RankedContact)
CSV_COLUMNS = [
    "rank",
    "id",
    "identity",
    "range_km",
    "closing_mps",
    "altitude_m",
    "rcs_m2",
    "score",
    "recommendation",
]

# Fixed-width table layout: (header, width)
TABLE_LAYOUT = [
    ("RANK", 10),
    ("ID", 12),
    ("IFF", 10),
    ("RANGE(km)", 12),
    ("CLOSING(m/s)", 14),
    ("ALT(m)", 12),
    ("RCS(m^2)", 10),
    ("SCORE", 12),
    ("SUGGESTION", 0),
]


def ranked_to_row(row: RankedContact) -> dict:
    """Convert a RankedContact to a flat row dict with display precision."""
    c = row.contact
    return {
        "rank": row.rank,
        "id": c.id,
        "identity": c.identity,
        "range_km": f"{c.range_km:.1f}",
        "closing_mps": f"{c.closing_mps:.0f}",
        "altitude_m": f"{c.altitude_m:.0f}",
        "rcs_m2": f"{c.rcs_m2:.2f}",
        "score": f"{row.score:.1f}",
        "recommendation": row.recommendation,
    }


# Excel display formats; cells keep full precision underneath
EXCEL_NUMBER_FORMATS = {
    "range_km": "0.0",
    "closing_mps": "0",
    "altitude_m": "0",
    "rcs_m2": "0.00",
    "score": "0.0",
}


def ranked_to_record(row: RankedContact) -> dict:
    """Convert a RankedContact to a flat row dict with raw numeric values."""
    c = row.contact
    return {
        "rank": row.rank,
        "id": c.id,
        "identity": c.identity,
        "range_km": c.range_km,
        "closing_mps": c.closing_mps,
        "altitude_m": c.altitude_m,
        "rcs_m2": c.rcs_m2,
        "score": row.score,
        "recommendation": row.recommendation,
    }


def format_table(ranked: list[RankedContact]) -> str:
    """Render the ranking as a left-aligned fixed-width text table."""
    header = "".join(f"{name:<{width}}" if width else name for name, width in TABLE_LAYOUT)
    rule = "-" * (sum(width for _, width in TABLE_LAYOUT) + len("SUGGESTION") + 1)
    lines = [header, rule]

    for row in ranked:
        values = list(ranked_to_row(row).values())
        cells = []
        for (_, width), value in zip(TABLE_LAYOUT, values, strict=True):
            cells.append(f"{value!s:<{width}}" if width else str(value))
        lines.append("".join(cells))

    return "\n".join(lines) + "\n"


def export_csv(ranked: list[RankedContact], output: Path | TextIO) -> int:
    """
    Export the ranking to CSV. Returns number of rows written.

    CSV is a display rendering: numbers carry table precision. Use JSON or
    Excel for full-precision values.
    """
    rows = [ranked_to_row(row) for row in ranked]

    if isinstance(output, Path):
        output.parent.mkdir(parents=True, exist_ok=True)
        with open(output, "w", newline="", encoding="utf-8") as f:
            writer = csv.DictWriter(f, fieldnames=CSV_COLUMNS)
            writer.writeheader()
            writer.writerows(rows)
    else:
        writer = csv.DictWriter(output, fieldnames=CSV_COLUMNS)
        writer.writeheader()
        writer.writerows(rows)

    return len(rows)


def ranking_to_json(ranked: list[RankedContact]) -> list[dict]:
    """Full-precision JSON-ready records, including score contributions."""
    return [row.model_dump(mode="json") for row in ranked]


def export_json(ranked: list[RankedContact], output: Path | TextIO) -> int:
    """Export the ranking to JSON (canonical, full precision)."""
    data = ranking_to_json(ranked)

    if isinstance(output, Path):
        output.parent.mkdir(parents=True, exist_ok=True)
        with open(output, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2)
    else:
        json.dump(data, output, indent=2)
        output.write("\n")

    return len(data)


def export_excel(ranked: list[RankedContact], output: Path) -> int:
    """Export the ranking to Excel as numeric cells with display number formats."""
    from openpyxl import Workbook
    from openpyxl.styles import Font
    from openpyxl.utils import get_column_letter

    rows = [ranked_to_record(row) for row in ranked]
    display_rows = [ranked_to_row(row) for row in ranked]
    output.parent.mkdir(parents=True, exist_ok=True)

    wb = Workbook()
    ws = wb.active
    ws.title = "Ranking"

    for col_idx, col_name in enumerate(CSV_COLUMNS, 1):
        ws.cell(row=1, column=col_idx, value=col_name).font = Font(bold=True)

    for row_idx, row_data in enumerate(rows, 2):
        for col_idx, col_name in enumerate(CSV_COLUMNS, 1):
            cell = ws.cell(row=row_idx, column=col_idx, value=row_data.get(col_name, ""))
            if col_name in EXCEL_NUMBER_FORMATS:
                cell.number_format = EXCEL_NUMBER_FORMATS[col_name]

    for col_idx, col_name in enumerate(CSV_COLUMNS, 1):
        max_length = len(col_name)
        for row_data in display_rows:
            max_length = max(max_length, min(len(str(row_data.get(col_name, ""))), 50))
        ws.column_dimensions[get_column_letter(col_idx)].width = max_length + 2

    ws.freeze_panes = "A2"

    wb.save(output)
    return len(rows)


def generate_report(result: RunResult, output: Path) -> None:
    """Generate a markdown run report."""
    output.parent.mkdir(parents=True, exist_ok=True)

    counts = result.recommendation_counts()

    report = f"""# ThreatRank Run Report

## Run Info
| Field | Value |
|---|---|
| Run ID | {result.run_id} |
| Source | {result.source} |
| Profile | {result.profile_name} |
| Started | {result.started_at.isoformat()} |
| Finished | {result.finished_at.isoformat() if result.finished_at else "In progress"} |
| Contacts Ranked | {len(result.ranked)} |
| Rows Rejected | {len(result.rejections)} |
| Lines Skipped | {result.skipped_lines} |
| Header Skipped | {"yes" if result.header_skipped else "no"} |

## Recommendations
| Recommendation | Count |
|---|---|
"""
    for label, count in sorted(counts.items(), key=lambda x: -x[1]):
        report += f"| {label} | {count} |\n"

    report += """
## Ranking
| Rank | ID | IFF | Score | Recommendation |
|---|---|---|---|---|
"""
    for row in result.ranked:
        report += (
            f"| {row.rank} | {row.contact.id} | {row.contact.identity} "
            f"| {row.score:.1f} | {row.recommendation} |\n"
        )

    report += "\n## Weights\n| Weight | Value |\n|---|---|\n"
    for name, value in result.weights.model_dump().items():
        report += f"| {name} | {value} |\n"

    if result.rejections:
        report += "\n## Rejected Rows\n"
        for rejection in result.rejections:
            report += f"- line {rejection.line_number} ({rejection.reason}): `{rejection.line}`\n"

    with open(output, "w", encoding="utf-8") as f:
        f.write(report)
