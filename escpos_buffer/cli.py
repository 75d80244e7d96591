"""Command-line interface for escpos-buffer."""

from __future__ import annotations

import argparse
import asyncio
import dataclasses
import logging
import sys
from pathlib import Path
from typing import Optional

from . import constants
from .commands import Alignment, TextSize
from .config import PrinterConfig, load_config
from .core.protocols import TransportFactory
from .errors import PrinterError
from .logging import configure_logging
from .printer import PrinterBuffer

LOGGER = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog=constants.APP_NAME, description="Send text to an ESC/POS serial printer"
    )
    parser.add_argument(
        "-c",
        "--config",
        type=Path,
        default=constants.DEFAULT_CONFIG_PATH,
        help=f"Path to configuration file (default: {constants.DEFAULT_CONFIG_PATH})",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    print_parser = subparsers.add_parser(
        "print", help="Print lines given as arguments, or read from stdin"
    )
    print_parser.add_argument("lines", nargs="*", help="Lines of text to print")
    print_parser.add_argument("--port", help="Serial device path (overrides config)")
    print_parser.add_argument(
        "--baud", type=int, help="Baud rate (overrides config)"
    )
    print_parser.add_argument(
        "--align", choices=[item.value for item in Alignment], help="Line alignment"
    )
    print_parser.add_argument(
        "--size", choices=[item.value for item in TextSize], help="Character size"
    )
    print_parser.add_argument("--bold", action="store_true", help="Emphasize text")
    print_parser.add_argument(
        "--feed",
        type=int,
        default=constants.DEFAULT_FEED_LINES,
        help=f"Lines to feed after the text (default: {constants.DEFAULT_FEED_LINES})",
    )
    print_parser.add_argument(
        "--no-init", action="store_true", help="Do not reset the printer first"
    )

    subparsers.add_parser(
        "show-config", help="Print the resolved configuration and exit"
    )

    return parser


def build_job(printer: PrinterBuffer, args: argparse.Namespace, lines: list[str]) -> None:
    if not args.no_init:
        printer.init()
    if args.align:
        printer.align(args.align)
    if args.size:
        printer.size(args.size)
    if args.bold:
        printer.bold_on()
    for line in lines:
        printer.text(line)
    if args.bold:
        printer.bold_off()
    if args.size:
        printer.size(TextSize.NORMAL)
    printer.feed(args.feed)


async def run_print(
    config: PrinterConfig,
    args: argparse.Namespace,
    lines: list[str],
    *,
    transport_factory: Optional[TransportFactory] = None,
) -> None:
    printer = PrinterBuffer.from_config(config, transport_factory=transport_factory)
    try:
        build_job(printer, args, lines)
        await printer.print()
    finally:
        await printer.close()


def main(
    argv: Optional[list[str]] = None,
    *,
    transport_factory: Optional[TransportFactory] = None,
) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    config = load_config(args.config)

    if args.command == "print":
        configure_logging(
            config.logging.level,
            log_path=config.logging.path,
            log_serial=config.logging.log_serial,
        )

        printer_config = config.printer
        if args.port:
            printer_config = dataclasses.replace(printer_config, port_path=args.port)
        if args.baud:
            printer_config = dataclasses.replace(printer_config, baud_rate=args.baud)

        lines = list(args.lines) or sys.stdin.read().splitlines()

        try:
            asyncio.run(
                run_print(
                    printer_config, args, lines, transport_factory=transport_factory
                )
            )
        except PrinterError as exc:
            LOGGER.error("Printing failed: %s", exc)
            return 1
        return 0

    if args.command == "show-config":
        print(f"Configuration loaded from {config.path!s}\n")
        for section in config.raw.sections():
            print(f"[{section}]")
            for key, value in config.raw[section].items():
                print(f"{key} = {value}")
            print()
        return 0

    LOGGER.error("Unknown command: %s", args.command)
    return 1


if __name__ == "__main__":
    sys.exit(main())
