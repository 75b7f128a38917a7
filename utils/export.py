"""Export fetched project lists to CSV, JSON lines or Excel.

Every export starts with source attribution: comment rows in CSV, a
``_metadata`` object on the first JSON line, and a "Metadata" sheet in
Excel. Each project row carries the computed funding progress and the
formatted amounts shown in listings.
"""

import csv
import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Iterable, Optional

import openpyxl

from utils.formatting import format_currency
from utils.funding import days_left, fundraising_end, project_progress

logger = logging.getLogger(__name__)

EXPORT_FORMATS = ("csv", "json", "xlsx")

EXPORT_COLUMNS = [
    "project_reference_id",
    "title",
    "category",
    "state",
    "city",
    "status",
    "funding_requirement",
    "commitment_gap",
    "total_committed_amount",
    "progress",
    "days_left",
    "funding_requirement_display",
    "commitment_gap_display",
]


def _as_dict(project: Any) -> dict[str, Any]:
    if hasattr(project, "model_dump"):
        return project.model_dump()
    return dict(project)


def project_row(project: Any, now: Optional[datetime] = None) -> dict[str, Any]:
    """Flatten one project into an export row with computed columns."""
    data = _as_dict(project)
    row = {col: data.get(col) for col in EXPORT_COLUMNS}
    row["progress"] = project_progress(data)
    row["days_left"] = days_left(fundraising_end(data), now=now)
    row["funding_requirement_display"] = format_currency(data.get("funding_requirement"))
    row["commitment_gap_display"] = format_currency(data.get("commitment_gap"))
    return row


def export_projects(projects: Iterable[Any], dest: Path, fmt: str = "csv",
                    filter_summary: str = "none",
                    source_url: Optional[str] = None) -> Path:
    """Write *projects* to *dest* in *fmt* and return the path.

    Args:
        projects: Project models or dicts
        dest: Output file (parent directories are created)
        fmt: "csv", "json" (newline-delimited) or "xlsx"
        filter_summary: Human-readable description of the active filters
        source_url: API URL the projects came from

    Raises:
        ValueError: If *fmt* is not a supported format
    """
    if fmt not in EXPORT_FORMATS:
        raise ValueError(f"Unsupported export format '{fmt}'. Must be one of: {', '.join(EXPORT_FORMATS)}")

    rows = [project_row(p) for p in projects]
    export_date = datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")
    metadata = {
        "source": "Municipal Project Funding",
        "export_date": export_date,
        "filters": filter_summary,
        "url": source_url or "",
        "total_records": len(rows),
    }

    dest = Path(dest)
    dest.parent.mkdir(parents=True, exist_ok=True)

    if fmt == "csv":
        with open(dest, "w", newline="", encoding="utf-8") as f:
            writer_raw = csv.writer(f)
            writer_raw.writerow(["# Source: Municipal Project Funding"])
            writer_raw.writerow([f"# Export Date: {export_date}"])
            writer_raw.writerow([f"# Filters: {filter_summary}"])
            writer_raw.writerow([f"# URL: {metadata['url']}"])
            writer_raw.writerow([f"# Total Records: {len(rows)}"])
            writer = csv.DictWriter(f, fieldnames=EXPORT_COLUMNS)
            writer.writeheader()
            writer.writerows(rows)

    elif fmt == "xlsx":
        wb = openpyxl.Workbook(write_only=True)
        meta_ws = wb.create_sheet("Metadata")
        meta_ws.append(["Source", metadata["source"]])
        meta_ws.append(["Export Date", export_date])
        meta_ws.append(["Filters", filter_summary])
        meta_ws.append(["URL", metadata["url"]])
        meta_ws.append(["Total Records", len(rows)])
        ws = wb.create_sheet("Projects")
        ws.append(EXPORT_COLUMNS)
        for row in rows:
            ws.append([row[col] for col in EXPORT_COLUMNS])
        wb.save(dest)

    else:
        with open(dest, "w", encoding="utf-8") as f:
            f.write(json.dumps({"_metadata": metadata}, default=str) + "\n")
            for row in rows:
                f.write(json.dumps(row, default=str) + "\n")

    logger.info("Exported %d projects to %s (%s)", len(rows), dest, fmt)
    return dest
