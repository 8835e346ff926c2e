"""Local pipeline trigger CLI (resolve/invoke)."""

from __future__ import annotations

import argparse
import json
from pathlib import Path
from typing import Any

from .catalog import DEFAULT_NAME_SUFFIX, load_pipeline_catalog_file
from .codecommit import CodeCommitDiffSource
from .codepipeline import CodePipelineTriggerSink
from .config import load_invocation_config
from .errors import EventInvalid, PipelineTriggerError
from .handler import run_invocation
from .logging_utils import configure_logging
from .paths import PathSet
from .resolver import explain, resolve


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Pipeline trigger local tooling")
    sub = parser.add_subparsers(dest="command", required=True)

    resolve_cmd = sub.add_parser("resolve", help="Resolve changed paths against a pipeline catalog file")
    resolve_cmd.add_argument("--catalog", required=True, help="YAML/JSON pipeline catalog")
    resolve_cmd.add_argument("--name-prefix", default="", help="Environment prefix for pipeline names")
    resolve_cmd.add_argument("--name-suffix", default=DEFAULT_NAME_SUFFIX, help="Pipeline name suffix")
    resolve_cmd.add_argument("paths", nargs="*", help="Changed file paths")

    invoke = sub.add_parser("invoke", help="Run one invocation against AWS using env configuration")
    invoke.add_argument("--event", required=True, help="EventBridge CodeCommit event JSON file")
    invoke.add_argument("--dry-run", action="store_true", help="Resolve targets without starting pipelines")
    return parser


def _cmd_resolve(args: argparse.Namespace) -> int:
    catalog = load_pipeline_catalog_file(
        Path(args.catalog),
        name_prefix=args.name_prefix,
        name_suffix=args.name_suffix,
    )
    paths = PathSet(args.paths)
    payload = {
        "targets": sorted(resolve(paths, catalog)),
        "matches": {
            pipeline_id: [list(pair) for pair in pairs]
            for pipeline_id, pairs in explain(paths, catalog).items()
        },
    }
    print(json.dumps(payload, sort_keys=True, ensure_ascii=True))
    return 0


def _read_event(path: Path) -> Any:
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except OSError as exc:
        raise EventInvalid(f"cannot read event file {str(path)!r}: {exc}") from exc
    except json.JSONDecodeError as exc:
        raise EventInvalid(f"cannot parse event file {str(path)!r}: {exc}") from exc


def _cmd_invoke(args: argparse.Namespace) -> int:
    config = load_invocation_config()
    configure_logging(config.log_level)
    event = _read_event(Path(args.event))
    result = run_invocation(
        event,
        config,
        diff_source=CodeCommitDiffSource(region=config.region, endpoint_url=config.endpoint_url),
        trigger_sink=CodePipelineTriggerSink(region=config.region, endpoint_url=config.endpoint_url),
        dry_run=args.dry_run,
    )
    print(json.dumps(result.summary(), sort_keys=True, ensure_ascii=True))
    return 0 if result.ok else 1


def main(argv: list[str] | None = None) -> int:
    configure_logging()
    parser = _build_parser()
    args = parser.parse_args(argv)
    try:
        if args.command == "resolve":
            return _cmd_resolve(args)
        return _cmd_invoke(args)
    except PipelineTriggerError as exc:
        parser.exit(1, f"{exc.__class__.__name__}: {exc}\n")


if __name__ == "__main__":
    raise SystemExit(main())
