"""CLI entry point: python -m v5_sheets.gui [--store PATH] [--log-level LEVEL]"""

from __future__ import annotations

import argparse
import logging
import os
import sys


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="V5 character sheets")
    parser.add_argument("--store", type=str, default=None, help="Path to the characters JSON file")
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging verbosity",
    )
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.store:
        os.environ["V5_SHEETS_STORE"] = args.store

    from v5_sheets.gui.app import V5SheetsApp

    app = V5SheetsApp()
    sys.exit(app.run(None))


if __name__ == "__main__":
    main()
