"""Module entrypoint for running the invoice API server."""

from __future__ import annotations

import logging
import os
import sys

from .config import load_config
from .server import DependencyError, run


def main() -> None:
    logging.basicConfig(
        level=os.getenv("INVOICE_LOG_LEVEL", "INFO").upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    try:
        run(load_config())
    except DependencyError as exc:
        print(str(exc), file=sys.stderr)
        raise SystemExit(1) from exc


if __name__ == "__main__":
    main()
