"""Run summary reporter with multiple output formats."""

from __future__ import annotations

import csv
import html
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Sequence

from rich.console import Console
from rich.table import Table

from janitor.models.resource import Resource, ResourceType
from janitor.units.base import CleanupUnit

# (bucket name, HTML color, terminal color) in report order
BUCKETS = (
    ("markings", "blue", "blue"),
    ("unmarkings", "orange", "orange1"),
    ("cleanups", "green", "green"),
    ("failures", "red", "red"),
)

CSV_FIELDS = ["resource_id", "name", "owner", "termination_reason", "expected_termination_time"]


@dataclass
class SummarySection:
    """Resources of one result bucket of one cleanup unit."""

    bucket: str
    color: str
    resource_type: ResourceType
    region: str
    resources: List[Resource]


class SummaryReporter:
    """Report a run's results in various formats (HTML email, CSV, terminal)."""

    def __init__(self, owner_tag: str = "owner") -> None:
        self.owner_tag = owner_tag

    def collect(self, units: Sequence[CleanupUnit]) -> List[SummarySection]:
        """Gather every unit's result buckets, in unit order."""
        sections = []
        for unit in units:
            buckets = {
                "markings": unit.marked_resources,
                "unmarkings": unit.unmarked_resources,
                "cleanups": unit.cleaned_resources,
                "failures": unit.failed_to_clean_resources,
            }
            for bucket, color, _ in BUCKETS:
                sections.append(
                    SummarySection(
                        bucket=bucket,
                        color=color,
                        resource_type=unit.resource_type,
                        region=unit.region,
                        resources=list(buckets[bucket]),
                    )
                )
        return sections

    def get_subject(self, account_name: str, region: str) -> str:
        return f"Janitor execution summary ({account_name}, {region})"

    def render_html(self, sections: List[SummarySection]) -> str:
        """Render the summary email body."""
        parts = []
        for section in sections:
            parts.append(
                f"<h3>Total <font color='{section.color}'>{section.bucket}</font> for "
                f"{section.resource_type.value} = <b>{len(section.resources)}</b> in region {section.region}</h3>"
            )
            parts.append(self._html_table(section.resources))
        return "".join(parts)

    def _html_table(self, resources: List[Resource]) -> str:
        if not resources:
            return "<p>-- No resources to list --</p>"

        header = "".join(
            f"<td bgcolor='grey'>{title}</td>" for title in ("Resource ID", "Name", "Owner", "Reason", "Termination")
        )
        rows = []
        for resource in resources:
            owner = resource.owner_email or resource.get_tag(self.owner_tag)
            owner_cell = html.escape(owner) if owner else "<font color='red'>Unknown</font>"
            termination = (
                resource.expected_termination_time.strftime("%Y-%m-%d") if resource.expected_termination_time else ""
            )
            rows.append(
                f"<tr><td>{html.escape(resource.id)}</td>"
                f"<td>{html.escape(resource.get_tag('Name') or '')}</td>"
                f"<td>{owner_cell}</td>"
                f"<td>{html.escape(resource.termination_reason or '')}</td>"
                f"<td>{termination}</td></tr>"
            )
        return f"<table border='2' cellpadding='4'><tr>{header}</tr>{''.join(rows)}</table>"

    def export_csv(self, sections: List[SummarySection], output_dir: str) -> List[Path]:
        """Export each section to its own CSV file.

        Files are named ``<bucket>-<RESOURCE_TYPE>-<region>.csv``.

        Args:
            sections: Summary sections
            output_dir: Output directory (created if missing)

        Returns:
            Paths of the written files
        """
        directory = Path(output_dir)
        directory.mkdir(parents=True, exist_ok=True)
        written = []

        for section in sections:
            output_path = directory / f"{section.bucket}-{section.resource_type.value}-{section.region}.csv"
            with open(output_path, "w", newline="") as f:
                writer = csv.DictWriter(f, fieldnames=CSV_FIELDS)
                writer.writeheader()
                for resource in section.resources:
                    writer.writerow(
                        {
                            "resource_id": resource.id,
                            "name": resource.get_tag("Name") or "",
                            "owner": resource.owner_email or resource.get_tag(self.owner_tag) or "",
                            "termination_reason": resource.termination_reason or "",
                            "expected_termination_time": (
                                resource.expected_termination_time.isoformat()
                                if resource.expected_termination_time
                                else ""
                            ),
                        }
                    )
            written.append(output_path)

        return written

    def format_terminal(self, sections: List[SummarySection], title: Optional[str] = None) -> str:
        """Format per-unit bucket counts for terminal output using Rich."""
        if not sections:
            return "No cleanup units ran."

        table = Table(title=title or "Janitor Run Summary")
        table.add_column("Resource Type", style="bold")
        table.add_column("Region")
        for bucket, _, terminal_color in BUCKETS:
            table.add_column(bucket.capitalize(), justify="right", style=terminal_color)

        rows: dict = {}
        for section in sections:
            key = (section.resource_type.value, section.region)
            rows.setdefault(key, {})[section.bucket] = len(section.resources)

        for (resource_type, region), counts in rows.items():
            table.add_row(resource_type, region, *(str(counts.get(bucket, 0)) for bucket, _, _ in BUCKETS))

        console = Console()
        with console.capture() as capture:
            console.print(table)

        return capture.get()
