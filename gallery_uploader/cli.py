"""Command line interface for gallery_uploader package."""
from __future__ import annotations

import argparse
import asyncio
import dataclasses
import json
import logging
import os
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import httpx
from rich.logging import RichHandler

from .cli_progress import (
    BatchProgressDisplay,
    RichNotificationSink,
    console,
    render_batch_report,
    render_configuration_summary,
    render_references,
)
from .file_collector import FileCollector
from .models import BatchReport, UploadConfig
from .orchestrator import Gallery, UploadOrchestrator
from .reference_list import from_locators
from .services.notifications import CollectingNotificationSink

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_NOT_DURABLE = 2


class CLIError(RuntimeError):
    """Raised when CLI validation/execution fails."""


def _setup_logging(debug: bool, silent: bool, log_level: Optional[str]) -> str:
    """
    Configure logging.

    Default behavior is silent unless --debug, --log-level or LOG_LEVEL is
    provided. Returns a string describing effective mode.
    """
    root_logger = logging.getLogger()
    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)

    logging.disable(logging.NOTSET)

    env_level = os.getenv("LOG_LEVEL")
    if silent or (not debug and not log_level and not env_level):
        logging.disable(logging.CRITICAL)
        root_logger.setLevel(logging.CRITICAL + 1)
        return "silent"

    if debug:
        level = logging.DEBUG
    else:
        level = getattr(logging, (log_level or env_level).upper(), logging.INFO)

    handler = RichHandler(
        console=console,
        rich_tracebacks=True,
        markup=False,
        show_time=False,
        show_path=False,
    )
    handler.setFormatter(logging.Formatter("%(message)s"))
    root_logger.addHandler(handler)
    root_logger.setLevel(level)
    return logging.getLevelName(level)


def _strip_optional_quotes(value: str) -> str:
    if len(value) >= 2 and value[0] == value[-1] and value[0] in {"'", '"'}:
        return value[1:-1]
    return value


def _load_env_file(path: Path, override: bool = False) -> None:
    if not path.exists():
        raise CLIError(f"env file not found: {path}")
    if not path.is_file():
        raise CLIError(f"env path is not a file: {path}")

    try:
        content = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise CLIError(f"could not read env file {path}: {exc}") from exc

    for raw_line in content.splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        if line.startswith("export "):
            line = line[len("export ") :].strip()
        if "=" not in line:
            continue

        key, value = line.split("=", 1)
        key = key.strip()
        if not key:
            continue

        value = _strip_optional_quotes(value.strip())
        if override or key not in os.environ:
            os.environ[key] = value


def _resolve_default_env_file() -> Optional[Path]:
    default_env = Path(".env")
    return default_env if default_env.exists() and default_env.is_file() else None


def _build_config(args: argparse.Namespace) -> UploadConfig:
    try:
        config = UploadConfig.from_env()
        overrides: Dict[str, Any] = {}
        if args.max_images is not None:
            overrides["max_images"] = args.max_images
        if args.max_bytes is not None:
            overrides["max_bytes"] = args.max_bytes
        if args.parallel is not None:
            overrides["max_concurrency"] = args.parallel
        return dataclasses.replace(config, **overrides) if overrides else config
    except ValueError as exc:
        raise CLIError(str(exc)) from exc


def _report_to_dict(report: BatchReport) -> Dict[str, Any]:
    return {
        "accepted_count": report.accepted_count,
        "fallback_count": report.fallback_count,
        "rejected_count": report.rejected_count,
        "warnings": [
            {"filename": w.filename, "reason": w.reason.value, "detail": w.detail}
            for w in report.warnings
        ],
        "error": report.error,
        "remaining_slots": report.remaining_slots,
    }


async def _open_gallery(
    orchestrator: UploadOrchestrator,
    listing_id: Optional[str],
    existing: Optional[List[str]],
    max_images: int,
) -> Gallery:
    if existing is not None:
        return orchestrator.gallery(from_locators(existing), max_allowed=max_images)
    if listing_id:
        try:
            return await orchestrator.open_gallery(listing_id, max_allowed=max_images)
        except (RuntimeError, httpx.HTTPError) as exc:
            raise CLIError(f"could not load listing {listing_id}: {exc}") from exc
    return orchestrator.gallery(max_allowed=max_images)


async def _run_upload(args: argparse.Namespace, config: UploadConfig) -> int:
    api_url = os.getenv("MARKETPLACE_API_URL")
    if not api_url:
        raise CLIError("MARKETPLACE_API_URL environment variable is not set")

    try:
        candidates = FileCollector.collect_candidates(args.paths)
    except OSError as exc:
        raise CLIError(str(exc)) from exc
    if not candidates:
        raise CLIError("no files to upload")

    collected = CollectingNotificationSink()
    notifier = collected if args.json else RichNotificationSink()

    async with UploadOrchestrator(
        api_url,
        config=config,
        notifier=notifier,
        token=os.getenv("MARKETPLACE_API_TOKEN"),
        session_cookie=os.getenv("MARKETPLACE_SESSION_COOKIE"),
    ) as orchestrator:
        gallery = await _open_gallery(orchestrator, args.listing_id, args.existing, config.max_images)

        display = None
        if not args.json:
            display = BatchProgressDisplay()
            display.attach(orchestrator.events)
        try:
            report = await gallery.upload(candidates)
        finally:
            if display is not None:
                display.detach(orchestrator.events)

        saved = False
        exit_code = EXIT_OK if report.success else EXIT_ERROR
        if report.success and args.save:
            if not gallery.is_durable and not args.allow_preview:
                exit_code = EXIT_NOT_DURABLE
            else:
                try:
                    await orchestrator.save_gallery(args.listing_id, gallery, allow_ephemeral=args.allow_preview)
                except (RuntimeError, httpx.HTTPError) as exc:
                    raise CLIError(f"could not save listing {args.listing_id}: {exc}") from exc
                saved = True

        if args.json:
            print(
                json.dumps(
                    {
                        "references": gallery.locators(),
                        "durable": gallery.is_durable,
                        "saved": saved,
                        "report": _report_to_dict(report),
                        "notifications": [
                            {"severity": n.severity.value, "title": n.title, "message": n.message}
                            for n in collected.notifications
                        ],
                    },
                    indent=2,
                )
            )
            return exit_code

        render_batch_report(report)
        render_references(gallery.references)
        if exit_code == EXIT_NOT_DURABLE:
            console.print(
                f"[yellow]Not saved:[/yellow] {len(gallery.pending_resave)} image(s) are preview only. "
                "Upload them again or pass --allow-preview.",
                highlight=False,
            )
        elif saved:
            console.print(f"[green]Saved listing {args.listing_id}[/green]", highlight=False)
        return exit_code


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="gallery-up",
        description="Upload images to a marketplace listing gallery.",
    )
    parser.add_argument("paths", nargs="*", type=Path, help="Image files or folders, in gallery order")
    parser.add_argument("-l", "--listing-id", default=None, help="Listing whose gallery is updated")
    parser.add_argument(
        "-e",
        "--existing",
        nargs="*",
        default=None,
        help="Current gallery references (skips loading them from the listing)",
    )
    parser.add_argument("-n", "--max-images", type=int, default=None, help="Gallery capacity")
    parser.add_argument("--max-bytes", type=int, default=None, help="Per-file size limit in bytes")
    parser.add_argument("-p", "--parallel", type=int, default=None, help="Concurrent uploads")
    parser.add_argument("-s", "--save", action="store_true", help="Save the updated gallery on the listing")
    parser.add_argument(
        "--allow-preview",
        action="store_true",
        help="Save even when some images are preview only",
    )
    parser.add_argument("--json", action="store_true", help="Print machine readable output")
    parser.add_argument(
        "--env-file",
        type=Path,
        default=None,
        help="Load environment variables from this .env file",
    )
    parser.add_argument("--debug", action="store_true", help="Enable debug logs")
    parser.add_argument("--silent", action="store_true", help="Only print errors")
    parser.add_argument(
        "--log-level",
        default=None,
        help="Explicit log level (DEBUG/INFO/WARNING/ERROR)",
    )
    parser.add_argument("--version", action="version", version="gallery-up (from gallery_uploader)")
    return parser


def run_cli(argv: Optional[Sequence[str]] = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    used_env_file = args.env_file or _resolve_default_env_file()
    if used_env_file is not None:
        try:
            _load_env_file(Path(used_env_file))
        except CLIError as exc:
            print(f"ERROR: {exc}", file=sys.stderr)
            return EXIT_ERROR

    effective_log_mode = _setup_logging(
        debug=args.debug,
        silent=args.silent,
        log_level=args.log_level,
    )

    if not args.paths:
        parser.print_help()
        return EXIT_OK

    if args.save and not args.listing_id:
        print("ERROR: --save requires --listing-id", file=sys.stderr)
        return EXIT_ERROR

    try:
        config = _build_config(args)
    except CLIError as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        return EXIT_ERROR

    if not args.json:
        render_configuration_summary(
            {
                "Paths": ", ".join(str(p) for p in args.paths),
                "Listing": args.listing_id or "-",
                "Marketplace API": os.getenv("MARKETPLACE_API_URL") or "(missing)",
                "Max Images": config.max_images,
                "Max Size": f"{config.max_bytes} bytes",
                "Allowed Types": ", ".join(config.allowed_type_prefixes),
                "Parallel": config.max_concurrency,
                "Save": "yes" if args.save else "no",
                "Env File": str(used_env_file) if used_env_file else "-",
                "Logging": effective_log_mode,
            }
        )

    try:
        return asyncio.run(_run_upload(args, config))
    except CLIError as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        return EXIT_ERROR
    except KeyboardInterrupt:
        print("Cancelled.", file=sys.stderr)
        return 130


def main() -> None:
    raise SystemExit(run_cli())


if __name__ == "__main__":
    main()
