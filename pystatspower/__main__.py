"""
Command-line entry point: run one power analysis request given as JSON.

    python -m pystatspower '{"test": "ANCOVA", "analysis": "power", "k": 3, "q": 2, "p": 1,
                             "n": 100, "alpha": 0.05, "es": 0.25}'

Reads the request from stdin when no argument is given and prints the
response JSON. Exit status is 0 on success and 1 on an engine error.
"""
from __future__ import annotations

import argparse
import json
import logging
import sys

from pystatspower._config import settings_from_env
from pystatspower.boundary import error_value, handle_json
from pystatspower.exceptions import ValidationError

logger = logging.getLogger("pystatspower.cli")


def main(argv: list[str] | None = None) -> int:
    ap = argparse.ArgumentParser(prog="pystatspower", description="Power analysis for parametric tests")
    ap.add_argument("request", nargs="?", help="JSON request (default: read from stdin)")
    ap.add_argument("--log-level", default="WARNING", choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    ap.add_argument("--pretty", action="store_true", help="indent the JSON output")
    args = ap.parse_args(argv)

    logging.basicConfig(level=getattr(logging, args.log_level), format="%(levelname)s:%(message)s")

    text = args.request if args.request is not None else sys.stdin.read()
    try:
        settings = settings_from_env()
    except ValidationError as e:
        print(json.dumps({"ok": False, "error": error_value(e)}))
        return 1
    logger.debug("Settings: %s", settings)

    response = json.loads(handle_json(text, settings))
    if response["ok"]:
        logger.info("Solved %s", response["result"]["analysis"])
    print(json.dumps(response, indent=2 if args.pretty else None))
    return 0 if response["ok"] else 1


if __name__ == "__main__":
    sys.exit(main())
