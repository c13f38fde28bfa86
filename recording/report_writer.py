"""Writers that persist a BurstReport as CSV tables and a JSON document."""
from __future__ import annotations

import csv
import json
import logging
import math
from pathlib import Path
from typing import Dict, List, Optional, Union

from shared.models import BurstReport

logger = logging.getLogger(__name__)

EVENT_COLUMNS = ("tp", "secs", "freqs", "pwr", "dur", "spec", "start", "end", "lower_freq", "upper_freq")

PathLike = Union[str, Path]


def _cell(value) -> str:
    if value is None:
        return ""
    if isinstance(value, float) and math.isnan(value):
        return ""
    return repr(value) if isinstance(value, float) else str(value)


def event_rows(report: BurstReport) -> List[Dict[str, str]]:
    band_names = [f"band_{i}" for i in range(len(report.bands))]
    rows = []
    for event in report.events:
        record = event.to_dict()
        row = {name: _cell(record[name]) for name in EVENT_COLUMNS}
        for name, value in zip(band_names, event.band_powers):
            row[name] = _cell(value)
        rows.append(row)
    return rows


def write_events_csv(report: BurstReport, path: PathLike) -> Path:
    """One row per burst; undefined durations, widths and band powers are empty cells."""
    path = Path(path)
    fieldnames = list(EVENT_COLUMNS) + [f"band_{i}" for i in range(len(report.bands))]
    with open(path, "w", newline="") as fh:
        writer = csv.DictWriter(fh, fieldnames=fieldnames, restval="")
        writer.writeheader()
        writer.writerows(event_rows(report))
    logger.info("wrote %d bursts to %s", len(report), path)
    return path


def write_thresholds_csv(report: BurstReport, path: PathLike) -> Path:
    path = Path(path)
    with open(path, "w", newline="") as fh:
        writer = csv.writer(fh)
        writer.writerow(["freq_hz", "thresh"])
        for freq, thresh in zip(report.f0s.tolist(), report.thresholds.tolist()):
            writer.writerow([repr(freq), repr(thresh)])
    return path


def _json_safe(value):
    if isinstance(value, float) and not math.isfinite(value):
        return None
    if isinstance(value, dict):
        return {k: _json_safe(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_json_safe(v) for v in value]
    return value


def write_report_json(report: BurstReport, path: PathLike, *, config: Optional[Dict[str, object]] = None) -> Path:
    path = Path(path)
    document = report.to_dict()
    document["summary"] = report.summary()
    if config is not None:
        document["config"] = config
    with open(path, "w") as fh:
        json.dump(_json_safe(document), fh, indent=2)
    return path


def save_report(report: BurstReport, stem: PathLike, *, config: Optional[Dict[str, object]] = None) -> Dict[str, Path]:
    """Write ``<stem>_events.csv``, ``<stem>_thresholds.csv`` and ``<stem>.json``."""
    stem = Path(stem)
    if stem.parent and not stem.parent.exists():
        stem.parent.mkdir(parents=True, exist_ok=True)
    return {
        "events": write_events_csv(report, stem.with_name(stem.name + "_events.csv")),
        "thresholds": write_thresholds_csv(report, stem.with_name(stem.name + "_thresholds.csv")),
        "json": write_report_json(report, stem.with_name(stem.name + ".json"), config=config),
    }


__all__ = ["EVENT_COLUMNS", "event_rows", "write_events_csv", "write_thresholds_csv", "write_report_json", "save_report"]
