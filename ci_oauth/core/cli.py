"""Shared command-line plumbing."""

from __future__ import annotations

import argparse
import sys

EXIT_OK = 0
EXIT_FAILURE = 1


class ArgumentParser(argparse.ArgumentParser):
    """argparse parser whose usage errors exit 1 like every other failure."""

    def error(self, message: str) -> None:  # type: ignore[override]
        self.print_usage(sys.stderr)
        self.exit(EXIT_FAILURE, f"{self.prog}: error: {message}\n")


def parse_or_exit_code(
    parser: argparse.ArgumentParser, argv: list[str] | None
) -> argparse.Namespace | int:
    """Parse ``argv``, turning argparse's ``SystemExit`` into a return code."""
    try:
        return parser.parse_args(argv)
    except SystemExit as exc:
        return exc.code if isinstance(exc.code, int) else EXIT_FAILURE


__all__ = ["ArgumentParser", "EXIT_FAILURE", "EXIT_OK", "parse_or_exit_code"]
