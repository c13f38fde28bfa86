"""Report export."""

from .report_writer import save_report, write_events_csv, write_report_json, write_thresholds_csv

__all__ = ["save_report", "write_events_csv", "write_report_json", "write_thresholds_csv"]
