"""Command line entry point: detect beta bursts in a recorded signal."""

from __future__ import annotations

import argparse
import json
import logging
from dataclasses import replace
from pathlib import Path
from typing import Dict, List, Optional, Sequence

from analysis.tfr import find_bursts
from core.config import BurstConfig
from daq.file_source import load_signal
from recording.report_writer import save_report
from shared.models import InvalidInput

logger = logging.getLogger("betaburst")


def _pair(text: str) -> List[float]:
    parts = text.replace(",", " ").split()
    if len(parts) != 2:
        raise argparse.ArgumentTypeError(f"expected two numbers, got {text!r}")
    try:
        return [float(p) for p in parts]
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected two numbers, got {text!r}") from None


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="betaburst",
        description="Identify beta-frequency bursts in single-channel electrophysiological data",
    )
    parser.add_argument("signal", help="Recording to analyse (.wav, .npy or .npz)")
    parser.add_argument("--sample-rate", type=float, help="Sample rate in Hz (required for .npy)")
    parser.add_argument("--channel", type=int, help="Channel index for multi-channel files")
    parser.add_argument("--config", type=Path, help="JSON file with analysis options")
    parser.add_argument("--m", type=float, help="Number of Morlet cycles")
    parser.add_argument("--n-meds", type=float, help="Threshold in multiples of the median power")
    parser.add_argument("--prop-pwr", type=float, help="Fraction of peak power that bounds a burst")
    parser.add_argument("--peak-freqs", type=_pair, help="Burst frequency range, e.g. '13 30'")
    parser.add_argument("--event-gap", type=float, help="Minimum gap between bursts in seconds")
    parser.add_argument(
        "--band",
        type=_pair,
        action="append",
        dest="bands",
        help="Frequency band for power at burst times (repeatable), e.g. '8 12'",
    )
    parser.add_argument("--workers", type=int, help="Threads used to characterise bursts")
    parser.add_argument("--output", type=Path, help="Output file stem (default: next to the signal)")
    parser.add_argument("--log-level", choices=["DEBUG", "INFO", "WARNING", "ERROR"], default="INFO")
    return parser


def load_config(args: argparse.Namespace) -> BurstConfig:
    options: Dict[str, object] = {}
    if args.config is not None:
        with open(args.config) as fh:
            options = json.load(fh)
        if not isinstance(options, dict):
            raise InvalidInput(f"{args.config}: options must be a JSON object")
    config = BurstConfig.from_mapping(options)

    overrides = {
        "m": args.m,
        "n_meds": args.n_meds,
        "prop_pwr": args.prop_pwr,
        "peak_freqs": args.peak_freqs,
        "event_gap": args.event_gap,
        "bands": args.bands,
        "max_workers": args.workers,
    }
    overrides = {name: value for name, value in overrides.items() if value is not None}
    if overrides:
        config = replace(config, **overrides)
    config.validate()
    return config


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=getattr(logging, args.log_level), format="%(levelname)s %(name)s: %(message)s")

    try:
        config = load_config(args)
        samples, sample_rate = load_signal(args.signal, sample_rate=args.sample_rate, channel=args.channel)
        report = find_bursts(samples, sample_rate, config)
    except (InvalidInput, json.JSONDecodeError) as exc:
        logger.error("%s", exc)
        return 2
    except OSError as exc:
        logger.error("could not read input: %s", exc)
        return 1

    summary = report.summary()
    logger.info(
        "%d bursts (%.2f per second), median duration %s ms",
        summary["n_bursts"],
        summary["rate_per_sec"],
        "n/a" if summary["median_duration_ms"] is None else f"{summary['median_duration_ms']:.1f}",
    )

    stem = args.output or Path(args.signal).with_name(Path(args.signal).stem + "_bursts")
    try:
        written = save_report(report, stem, config=config.to_dict())
    except OSError as exc:
        logger.error("could not write report: %s", exc)
        return 1
    for kind, path in written.items():
        logger.info("%s: %s", kind, path)
    logger.info("done!")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
