from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, List, Optional, Sequence, Tuple

from pydantic import ValidationError

from citation_resolver.config import ResolverConfig
from citation_resolver.core.models import BatchResult, InputRecord, OutcomeTag, ProgressEvent
from citation_resolver.exceptions import ConfigError, InputError
from citation_resolver.services.batch_service import BatchEnrichmentService
from citation_resolver.services.resolution_service import ResolutionService

logger = logging.getLogger(__name__)


def _non_negative_float(value: str) -> float:
    try:
        number = float(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"not a number: {value!r}") from exc
    if number < 0:
        raise argparse.ArgumentTypeError("must not be negative")
    return number


def load_records(path: Path) -> Tuple[List[InputRecord], Optional[str]]:
    """Read records from a JSON array or a ``{"sources": [...]}`` export."""

    try:
        payload = json.loads(path.read_text(encoding="utf-8"))
    except OSError as exc:
        raise InputError(f"Cannot read {path}: {exc}") from exc
    except ValueError as exc:
        raise InputError(f"{path} is not valid JSON: {exc}") from exc

    collection_name: Optional[str] = None
    if isinstance(payload, dict):
        collection_name = payload.get("collection") or payload.get("notebook") or None
        payload = payload.get("sources")
    if not isinstance(payload, list):
        raise InputError(f"{path} must contain a list of sources")

    records: List[InputRecord] = []
    for position, item in enumerate(payload):
        if not isinstance(item, dict):
            raise InputError(f"Source #{position} is not an object")
        try:
            records.append(InputRecord.from_dict(item))
        except ValueError as exc:
            raise InputError(f"Source #{position} is invalid: {exc}") from exc
    return records, collection_name


def _serialize_result(result: BatchResult) -> dict[str, Any]:
    return {
        "collection": result.collection_name,
        "results": result.tallies.as_dict(),
        "sources": [record.to_dict() for record in result.records],
    }


def _write_json(data: Any, output: Optional[Path]) -> None:
    text = json.dumps(data, ensure_ascii=False, indent=2)
    if output is None:
        print(text)
    else:
        output.write_text(text + "\n", encoding="utf-8")


def _log_progress(event: ProgressEvent) -> None:
    if event.outcome is OutcomeTag.COMPLETE:
        logger.info("%s %s", event.status_text, event.tallies.as_dict() if event.tallies else "")
        return
    logger.info("[%d/%d] %s: %s", event.current, event.total, event.title_snippet, event.status_text)


def handle_enrich(args: argparse.Namespace) -> int:
    records, collection_name = load_records(args.input)
    try:
        config = ResolverConfig()
    except ValidationError as exc:
        raise ConfigError(str(exc)) from exc

    resolver = ResolutionService.from_config(config)
    service = BatchEnrichmentService(resolver, delay_s=args.delay)
    result = service.run(
        records,
        on_progress=_log_progress,
        collection_name=args.collection or collection_name,
    )
    _write_json(_serialize_result(result), args.output)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Citation metadata resolver")
    subparsers = parser.add_subparsers(dest="command", required=True)

    enrich_parser = subparsers.add_parser("enrich", help="Resolve metadata for a JSON list of sources")
    enrich_parser.add_argument("input", type=Path, help="JSON file with the sources to enrich")
    enrich_parser.add_argument("-o", "--output", type=Path, help="Write results here instead of stdout")
    enrich_parser.add_argument(
        "--delay",
        type=_non_negative_float,
        default=None,
        help="Seconds between records (defaults to RESOLVER_REQUEST_DELAY_S or 0.2)",
    )
    enrich_parser.add_argument("--collection", help="Collection name recorded with the results")
    enrich_parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    enrich_parser.set_defaults(func=handle_enrich)

    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )
    try:
        return args.func(args)
    except (InputError, ConfigError) as exc:
        logger.error("%s", exc)
        return 2


if __name__ == "__main__":
    sys.exit(main())
