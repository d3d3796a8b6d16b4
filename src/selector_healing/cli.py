#!/usr/bin/env python3
"""
Selector healing command line.

Heals one broken locator by comparing a baseline snapshot with the current one
and prints the ranked replacement locators.

Usage:
    selector-heal '#submit' baseline.json current.json
    selector-heal '#submit' before.html after.html --html --top 3
    selector-heal '#submit' baseline.json current.json --json --trace
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

from .core.config import settings
from .core.config_loader import ConfigurationError, get_healing_config
from .core.exceptions import SnapshotFormatError
from .core.healing_events import LoggingHealingObserver, RecordingHealingObserver
from .core.logging_config import setup_healing_logging
from .core.models.document_tree import Snapshot
from .core.models.healing_models import HealingResult
from .services.healing_orchestrator import HealingOrchestrator
from .services.html_snapshot_builder import build_snapshot_from_html


logger = logging.getLogger(__name__)

EXIT_HEALED = 0
EXIT_NOT_HEALED = 1
EXIT_BAD_INPUT = 2
LOG_LEVELS = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']


def load_snapshot(path: Path, html: bool = False, url: Optional[str] = None) -> Snapshot:
    """Load a snapshot from a JSON snapshot file, or from an HTML file when ``html`` is set.

    Raises:
        OSError: If the file cannot be read
        SnapshotFormatError: If the content is not a valid snapshot
    """
    try:
        content = path.read_text(encoding='utf-8')
    except UnicodeDecodeError as e:
        raise SnapshotFormatError(f"{path} is not valid UTF-8: {e}") from e
    if html:
        return build_snapshot_from_html(content, url or path.resolve().as_uri())

    try:
        data = json.loads(content)
    except json.JSONDecodeError as e:
        raise SnapshotFormatError(f"{path} is not valid JSON: {e}") from e
    return Snapshot.from_dict(data)


def format_results(results: List[HealingResult]) -> str:
    """Render results as a ranked table."""
    lines = [f"{'#':>3}  {'SCORE':>6}  {'STRATEGY':<12} SELECTOR"]
    for rank, result in enumerate(results, start=1):
        lines.append(f"{rank:>3}  {result.score:6.3f}  {result.strategy.value:<12} {result.selector}")
    return "\n".join(lines)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='selector-heal',
        description='Find replacement locators for a locator that no longer resolves'
    )
    parser.add_argument('locator', help="Broken locator, in '#id' form")
    parser.add_argument('baseline', type=Path, help='Snapshot in which the locator worked')
    parser.add_argument('current', type=Path, help='Snapshot in which the locator fails')
    parser.add_argument(
        '--html', action='store_true',
        help='Treat BASELINE and CURRENT as HTML documents instead of JSON snapshots'
    )
    parser.add_argument(
        '--url', type=str, default=None,
        help='Url recorded on snapshots built from HTML'
    )
    parser.add_argument(
        '--top', '-n', type=int, default=None,
        help='Show only the best N results'
    )
    parser.add_argument(
        '--json', action='store_true',
        help='Output results as a JSON array'
    )
    parser.add_argument(
        '--trace', action='store_true',
        help='Print the pipeline trace events'
    )
    parser.add_argument(
        '--config', '-c', type=str, default=None,
        help='Healing configuration YAML (defaults to HEALING_CONFIG_PATH)'
    )
    parser.add_argument(
        '--log-level', type=str.upper, choices=LOG_LEVELS, default=settings.LOG_LEVEL,
        help='Log level for stderr and log files'
    )
    parser.add_argument(
        '--log-dir', type=str, default=settings.LOG_DIR,
        help='Directory for rotating log files'
    )
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    setup_healing_logging(args.log_level, args.log_dir, settings.STRUCTURED_LOGGING)

    try:
        config = get_healing_config(args.config)
        baseline = load_snapshot(args.baseline, args.html, args.url)
        current = load_snapshot(args.current, args.html, args.url)
    except (OSError, SnapshotFormatError, ConfigurationError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_BAD_INPUT

    recorder = RecordingHealingObserver(forward_to=LoggingHealingObserver())
    results: List[HealingResult] = []
    if config.enabled:
        orchestrator = HealingOrchestrator(score_threshold=config.score_threshold, observer=recorder)
        results = orchestrator.heal(args.locator, baseline, current)
    else:
        logger.info("Selector healing disabled by configuration")

    limit = args.top if args.top is not None else config.max_results
    if limit is not None:
        results = results[:limit]

    if args.json:
        print(json.dumps([result.to_dict() for result in results], indent=2))
    elif results:
        print(format_results(results))
    else:
        print(f"No replacement found for {args.locator}")

    if args.trace:
        for event in recorder.events:
            print(f"[{event.event_type.value}] {event.message}", file=sys.stderr)

    return EXIT_HEALED if results else EXIT_NOT_HEALED


if __name__ == "__main__":
    sys.exit(main())
