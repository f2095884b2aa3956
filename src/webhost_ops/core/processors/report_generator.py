#!/usr/bin/env python3
"""Simple CSV Report Generator."""

import csv
from pathlib import Path
from typing import Dict, List, Any, Optional
from webhost_ops.core.constants import DEFAULT_REPORT_EXTENSION
from webhost_ops.utils.logger import setup_logger

RESOURCE_FIELDS = ["kind", "name", "status", "identifier"]


class CSVReportGenerator:
    """Simple CSV report generator."""

    def __init__(self, output_dir: str = "reports"):
        """Initialize the CSV report generator."""
        self.output_dir = output_dir
        self.logger = setup_logger(__name__, "report_generator.log")

    def generate_report(
        self,
        data: List[Dict[str, Any]],
        filename: str,
        fieldnames: Optional[List[str]] = None,
    ) -> Optional[Path]:
        """Generate a CSV report from the provided data. Returns the written path."""
        if not data:
            self.logger.warning("No data provided for report generation")
            return None

        if not filename.endswith(DEFAULT_REPORT_EXTENSION):
            filename = f"{filename}{DEFAULT_REPORT_EXTENSION}"

        output_path = Path(self.output_dir) / filename
        output_path.parent.mkdir(parents=True, exist_ok=True)

        # Keep the given columns first, then any extra keys in sorted order
        fieldnames = list(fieldnames or [])
        extra = set()
        for item in data:
            extra.update(k for k in item.keys() if k not in fieldnames)
        fieldnames.extend(sorted(extra))

        with open(output_path, "w", newline="", encoding="utf-8") as csvfile:
            writer = csv.DictWriter(csvfile, fieldnames=fieldnames, restval="")
            writer.writeheader()
            writer.writerows(data)

        self.logger.info(f"CSV report generated: {output_path} ({len(data)} records)")
        return output_path

    def write_resources(self, rows: List[Dict[str, Any]], output_path: str) -> Optional[Path]:
        """Write resource rows to an explicit file path."""
        path = Path(output_path)
        self.output_dir = str(path.parent)
        return self.generate_report(rows, path.name, RESOURCE_FIELDS)
