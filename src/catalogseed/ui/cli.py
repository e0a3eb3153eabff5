from __future__ import annotations

import argparse
import dataclasses
import logging
import sys
from pathlib import Path
from signal import SIGINT, signal
from typing import TYPE_CHECKING

from dotenv import load_dotenv

from catalogseed import __version__
from catalogseed.app import create_category, seed_catalog
from catalogseed.config import ConfigurationError, configure_logging, get_seeding_config
from catalogseed.domain.context import CancellationToken, ExecutionContext
from catalogseed.domain.errors import SeedCancelledError, SeedError
from catalogseed.domain.model import CategoryMatchPolicy

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence
    from types import FrameType

    from catalogseed.config import SeedingConfig

log = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_USAGE = 2
EXIT_CANCELLED = 130


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="catalogseed",
        description="Seed catalog products idempotently",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Log every seeding step, including SQL and migrations",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    apply = subparsers.add_parser("apply", help="Create seed products that do not exist yet")
    apply.add_argument(
        "--file",
        type=str,
        help="TOML seed file (defaults to CATALOGSEED_SEED_FILE or the built-in seed)",
    )
    apply.add_argument(
        "--timeout",
        type=float,
        help="Seconds after which the run is cancelled",
    )
    apply.add_argument(
        "--parallel",
        action="store_true",
        default=None,
        help="Attach stock and categories concurrently",
    )
    apply.add_argument(
        "--category-policy",
        choices=[policy.value for policy in CategoryMatchPolicy],
        help="How to handle a category name that matches several categories",
    )
    apply.add_argument(
        "--area",
        type=str,
        help="Execution area the writes are performed under",
    )

    category = subparsers.add_parser("category", help="Category maintenance commands")
    category_sub = category.add_subparsers(dest="category_command", required=True)
    category_create = category_sub.add_parser("create", help="Create a category")
    category_create.add_argument("name", type=str, help="Category name")
    category_create.add_argument(
        "--parent-id",
        type=int,
        help="Optional parent category id",
    )

    return parser.parse_args(list(argv))


def _seeding_config(args: argparse.Namespace) -> SeedingConfig:
    config = get_seeding_config()
    if args.timeout is not None and args.timeout <= 0:
        raise ValueError("Timeout must be positive")
    overrides: dict[str, object] = {}
    if args.file is not None:
        overrides["seed_file"] = Path(args.file).expanduser()
    if args.timeout is not None:
        overrides["timeout_seconds"] = args.timeout
    if args.parallel is not None:
        overrides["parallel"] = args.parallel
    if args.category_policy is not None:
        overrides["category_policy"] = CategoryMatchPolicy(args.category_policy)
    if args.area is not None:
        overrides["area"] = args.area
    return dataclasses.replace(config, **overrides)


def _cancel_on_sigint(token: CancellationToken) -> Callable[[int, FrameType | None], None]:
    def handler(_signal_received: int, _frame: FrameType | None) -> None:
        log.info("Cancelling seed run (Ctrl+C)")
        token.cancel()

    return handler


def _run_apply(config: SeedingConfig) -> int:
    token = CancellationToken()
    context = ExecutionContext.create(
        area=config.area,
        timeout_seconds=config.timeout_seconds,
        token=token,
    )
    previous = signal(SIGINT, _cancel_on_sigint(token))
    try:
        results = seed_catalog(context=context, config=config)
    finally:
        signal(SIGINT, previous)

    created = sum(1 for result in results if result.created)
    warned = sum(1 for result in results if result.has_warnings)
    log.info(
        "Seed run finished: seeds=%s, created=%s, with_warnings=%s",
        len(results),
        created,
        warned,
    )
    return EXIT_OK


def main(argv: Sequence[str] | None = None) -> int:
    """Main application entry point; returns the process exit code."""

    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    try:
        parsed_args = _parse_args(args_list)
        configure_logging(level=logging.DEBUG if parsed_args.verbose else logging.INFO)
        config = _seeding_config(parsed_args) if parsed_args.command == "apply" else None
        if parsed_args.command == "category" and not parsed_args.name.strip():
            raise ValueError("Category name must not be blank")  # noqa: TRY301
    except (ValueError, ConfigurationError):
        log.exception("CLI validation error")
        return EXIT_USAGE

    try:
        if config is not None:
            return _run_apply(config)
        if parsed_args.command == "category" and parsed_args.category_command == "create":
            create_category(parsed_args.name, parent_id=parsed_args.parent_id)
            return EXIT_OK
        raise ValueError(f"Unsupported command: {parsed_args.command}")  # noqa: TRY301
    except SeedCancelledError as exc:
        log.warning("Seed run cancelled: %s (product id=%s)", exc, exc.entity_id)
        return EXIT_CANCELLED
    except ConfigurationError:
        log.exception("Invalid configuration")
        return EXIT_USAGE
    except SeedError:
        log.exception("Fatal error during seeding")
        return EXIT_FAILURE
    except Exception:
        log.exception("Fatal error")
        return EXIT_FAILURE


def run() -> None:
    """Console-script entry point."""

    load_dotenv()
    sys.exit(main())


if __name__ == "__main__":
    run()
