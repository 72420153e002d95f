# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""Agentic microformats CLI: extract, actions, prepare commands.

Usage:
    agentic-microformats extract FILE [--format json|yaml|prompt] [-o PATH]
    agentic-microformats actions FILE
    agentic-microformats prepare FILE NAME [--target ID] [--values JSON]

FILE may be ``-`` to read markup from stdin.  Logs go to stderr.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from collections.abc import Iterator
from pathlib import Path

from . import Action, ExtractionResult
from .agent_dom import AgentDOM
from .config import OUTPUT_FORMATS, Settings
from .errors import ActionNotFoundError, AgenticMicroformatsError, DocumentLoadError
from .extract import extract_all
from .hints import requires_confirmation
from .logging_config import bind_invocation, configure
from .lxml_host import LxmlElement, parse_html
from .serializer import prepared_to_dict, to_agent_prompt, to_dict, to_json

logger = logging.getLogger(__name__)


def _require_cli_deps() -> None:
    """Check that CLI optional dependencies are installed."""
    try:
        import yaml  # noqa: F401
        from tabulate import tabulate  # noqa: F401
    except ImportError as e:
        print(
            f"Missing CLI dependency: {e.name}\nInstall with: pip install agentic-microformats[cli]",
            file=sys.stderr,
        )
        sys.exit(1)


def _load_document(source: str) -> LxmlElement:
    """Parse markup from a file path, or from stdin when *source* is ``-``."""
    if source == "-":
        html = sys.stdin.read()
    else:
        try:
            html = Path(source).read_text(encoding="utf-8")
        except OSError as e:
            raise DocumentLoadError(f"Cannot read {source}: {e.strerror or e}") from e
    return parse_html(html)


def _validate_output_path(path_str: str | None) -> Path | None:
    """Return the output file path, creating its parent directory if needed."""
    if not path_str:
        return None
    p = Path(path_str)
    p.parent.mkdir(parents=True, exist_ok=True)
    return p


def _iter_all_actions(result: ExtractionResult) -> Iterator[Action]:
    for top in result.resources:
        for resource in top.iter_tree():
            yield from resource.actions
    yield from result.actions


def _render(result: ExtractionResult, fmt: str, source: str) -> str:
    if fmt == "yaml":
        import yaml

        return yaml.safe_dump(to_dict(result), sort_keys=False, allow_unicode=True)
    if fmt == "prompt":
        return to_agent_prompt(result, source="stdin" if source == "-" else source)
    return to_json(result)


def cmd_extract(args: argparse.Namespace, settings: Settings) -> None:
    """Extract meta, resources and standalone actions from a document."""
    fmt = args.format or settings.output_format
    if fmt == "yaml":
        _require_cli_deps()

    result = extract_all(_load_document(args.file))
    logger.info("extracted %d resource(s), %d standalone action(s)", result.total_resources, len(result.actions))
    output = _render(result, fmt, args.file)

    output_path = _validate_output_path(args.output)
    if output_path is None:
        print(output)
        return
    output_path.write_text(output if output.endswith("\n") else output + "\n", encoding="utf-8")
    print(f"Saved to {output_path}")


def _action_row(action: Action) -> list[str]:
    params = ", ".join(p.name + ("*" if p.required else "") for p in action.params)
    return [
        action.name,
        action.target or "-",
        str(action.method),
        action.endpoint or "-",
        params or "-",
        "yes" if requires_confirmation(action.hints) else "",
    ]


def cmd_actions(args: argparse.Namespace, settings: Settings) -> None:
    """Print a table of every action, resource-owned ones first."""
    _require_cli_deps()
    from tabulate import tabulate

    result = extract_all(_load_document(args.file))
    rows = [_action_row(a) for a in _iter_all_actions(result)]
    if not rows:
        print("No actions found.")
        return
    headers = ["Action", "Target", "Method", "Endpoint", "Params", "Confirm"]
    print(tabulate(rows, headers=headers, tablefmt="simple"))


def cmd_prepare(args: argparse.Namespace, settings: Settings) -> None:
    """Print the request descriptor for one action."""
    values = None
    if args.values is not None:
        try:
            values = json.loads(args.values)
        except ValueError:
            values = None
        if not isinstance(values, dict):
            print("Error: --values must be a JSON object.", file=sys.stderr)
            sys.exit(1)

    dom = AgentDOM(_load_document(args.file))
    action = dom.get_action(args.name, args.target)
    if action is None:
        where = f" targeting {args.target!r}" if args.target else ""
        raise ActionNotFoundError(f"No action named {args.name!r}{where}", name=args.name, target=args.target)

    prepared = dom.prepare_action(action, values)
    for warning in prepared.warnings:
        logger.info("prepare %s: %s", action.name, warning)
    print(json.dumps(prepared_to_dict(prepared), ensure_ascii=False, indent=2))


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Extract agent-facing resources and actions from annotated HTML",
        prog="agentic-microformats",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging to stderr")
    parser.add_argument("--log-json", action="store_true", help="Emit log records as JSON lines")
    subparsers = parser.add_subparsers(dest="command", required=True)

    _extract_epilog = """\
examples:
  %(prog)s page.html                       JSON to stdout
  %(prog)s page.html --format prompt       Compact outline for an LLM agent
  %(prog)s - --format yaml < page.html     Read markup from stdin
  %(prog)s page.html -o out/result.json    Save to file
"""
    p_extract = subparsers.add_parser(
        "extract",
        help="Extract meta, resources and actions",
        epilog=_extract_epilog,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    p_extract.add_argument("file", metavar="FILE", help="HTML file, or - for stdin")
    p_extract.add_argument(
        "--format",
        type=str,
        choices=list(OUTPUT_FORMATS),
        default=None,
        help="Output format (default: json, or AGENTIC_MF_FORMAT)",
    )
    p_extract.add_argument("-o", "--output", type=str, metavar="PATH", help="Write output to PATH instead of stdout")

    p_actions = subparsers.add_parser("actions", help="List every action as a table")
    p_actions.add_argument("file", metavar="FILE", help="HTML file, or - for stdin")

    p_prepare = subparsers.add_parser("prepare", help="Build the request descriptor for an action")
    p_prepare.add_argument("file", metavar="FILE", help="HTML file, or - for stdin")
    p_prepare.add_argument("name", metavar="NAME", help="Action name")
    p_prepare.add_argument("--target", type=str, metavar="ID", default=None, help="Only match this target id")
    p_prepare.add_argument(
        "--values",
        type=str,
        metavar="JSON",
        default=None,
        help="Request body as a JSON object (default: built from the action's parameters)",
    )
    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entry point."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    settings = Settings.from_env()
    configure(
        json_output=args.log_json or settings.log_json,
        level="DEBUG" if args.verbose else settings.log_level,
    )
    bind_invocation(args.command, args.file)

    commands = {"extract": cmd_extract, "actions": cmd_actions, "prepare": cmd_prepare}
    try:
        commands[args.command](args, settings)
    except KeyboardInterrupt:
        print("\nInterrupted.", file=sys.stderr)
        sys.exit(130)
    except AgenticMicroformatsError as e:
        print(f"Error: {e}", file=sys.stderr)
        if args.verbose:
            import traceback

            traceback.print_exc(file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
