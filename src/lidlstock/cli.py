from __future__ import annotations

import argparse
import logging

from rich.logging import RichHandler

from lidlstock.config import ConfigError, load_config
from lidlstock.runner import build_service, is_valid_postal_code
from lidlstock.stores import StoreDirectoryError

LOG = logging.getLogger(__name__)


def configure_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(rich_tracebacks=True)],
    )


def postal_code_arg(value: str) -> str:
    if not is_valid_postal_code(value):
        raise argparse.ArgumentTypeError("postcode must be 4 digits")
    return value


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="lidlstock")
    parser.add_argument("--verbose", action="store_true")
    parser.add_argument("--config", help="optional YAML config file")
    parser.add_argument("--headed", action="store_true", help="show browser while resolving products")

    sub = parser.add_subparsers(dest="command")

    sub.add_parser("menu", help="interactive menu (default)")

    stores = sub.add_parser("stores", help="refresh and list the store directory")
    stores.add_argument("--cached", action="store_true", help="list the cached stores without refreshing")

    check = sub.add_parser("check", help="check stock for one product URL")
    check.add_argument("url")
    check.add_argument("--variant", help="variant number to check")
    check.add_argument("--postcode", type=postal_code_arg, default="", help="4-digit postcode filter")

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.verbose)

    try:
        config = load_config(args.config)
    except ConfigError as exc:
        LOG.error("%s", exc)
        raise SystemExit(1) from exc

    service = build_service(config, headless=False if args.headed else None)
    command = args.command or "menu"

    try:
        if command == "menu":
            service.run_menu()
        elif command == "stores":
            if not args.cached:
                service.directory.refresh()
            service.list_stores()
        elif command == "check":
            report = service.check_product(args.url, variant_choice=args.variant, postal_code=args.postcode)
            return 0 if report is not None and report.has_data else 1
        else:
            raise RuntimeError(f"unsupported command: {command}")
    except StoreDirectoryError as exc:
        LOG.error("%s", exc)
        raise SystemExit(1) from exc

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
