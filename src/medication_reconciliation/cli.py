# ============================================================================
# src/medication_reconciliation/cli.py
# ============================================================================
"""
medrec command line

    medrec reconcile NOTE_FILE --existing meds.json --actor "Dr. Rao" [--offline]
    medrec normalize "Inj. Amp 100mg" gent

`reconcile` prints the extraction, the categorized diff and the flattened
list as JSON on stdout. Logs go to stderr.
"""

import argparse
import asyncio
import inspect
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

from .config import logging_settings
from .core.context import ExtractionContext, MedicationRecord
from .core.medication_pipeline import MedicationPipeline
from .utils.drug_name_normalizer import normalize_drug_name
from .utils.exceptions import ConfigurationError
from .utils.logging import setup_logging

logger = logging.getLogger(__name__)


def _load_existing(path: Optional[str]) -> List[MedicationRecord]:
    """Read a JSON list of records, or an object with a `medications` list."""
    if not path:
        return []
    data = json.loads(Path(path).read_text(encoding="utf-8"))
    if isinstance(data, dict):
        data = data.get("medications", [])
    return [MedicationRecord.from_dict(item) for item in data]


async def _reconcile(args: argparse.Namespace) -> int:
    note_text = Path(args.note_file).read_text(encoding="utf-8")
    existing = _load_existing(args.existing)
    context = ExtractionContext(
        age=args.age,
        age_unit=args.age_unit,
        care_unit=args.unit,
        diagnosis=args.diagnosis,
        current_medications=existing,
    )

    config = {"backend": "none"} if args.offline else {}
    pipeline = MedicationPipeline(config)
    try:
        bundle = await pipeline.process_note(
            note_text, context, existing, args.actor, timestamp=args.timestamp
        )
    finally:
        await pipeline.close()

    print(json.dumps(bundle.to_dict(), indent=2))
    return 0


def _normalize(args: argparse.Namespace) -> int:
    for name in args.names:
        print(normalize_drug_name(name))
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="medrec",
        description="Extract medication orders from clinical notes and reconcile them",
    )
    parser.add_argument("--log-level", default=logging_settings.LOG_LEVEL, help="Logging level")
    parser.add_argument("--json-logs", action="store_true", default=logging_settings.LOG_JSON,
                        help="Emit logs as JSON lines")
    subparsers = parser.add_subparsers(dest="command", required=True)

    reconcile = subparsers.add_parser("reconcile", help="Reconcile a note against a medication list")
    reconcile.add_argument("note_file", help="Path to the clinical note text")
    reconcile.add_argument("--existing", help="JSON file with the current medication list")
    reconcile.add_argument("--actor", required=True, help="Who is recording the change")
    reconcile.add_argument("--timestamp", help="ISO 8601 time of the change (default: now)")
    reconcile.add_argument("--offline", action="store_true", help="Skip the LLM; regex fallback only")
    reconcile.add_argument("--age", type=float, help="Patient age")
    reconcile.add_argument("--age-unit", default="", help="Unit of --age (days, months, years)")
    reconcile.add_argument("--unit", default="", help="Care unit, e.g. NICU")
    reconcile.add_argument("--diagnosis", default="", help="Primary diagnosis")
    reconcile.set_defaults(handler=_reconcile)

    normalize = subparsers.add_parser("normalize", help="Print canonical drug names")
    normalize.add_argument("names", nargs="+", help="Raw drug names")
    normalize.set_defaults(handler=_normalize)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    setup_logging(level=args.log_level, format_json=args.json_logs)

    try:
        if inspect.iscoroutinefunction(args.handler):
            return asyncio.run(args.handler(args))
        return args.handler(args)
    except (OSError, json.JSONDecodeError, ConfigurationError) as e:
        logger.debug("medrec %s failed", args.command, exc_info=True)
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
