"""Reporting package — CSV report and JSON run summary."""

from .csv_export import ReportWriter
from .json_export import export_summary_json

__all__ = [
    "ReportWriter",
    "export_summary_json",
]
