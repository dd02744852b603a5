"""Command that serves the workflow API over HTTP."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from datetime import datetime, timezone
from typing import Optional, Sequence

from gadflow.api import create_app
from gadflow.config import configure

_STANDARD_ATTRS = frozenset(
    logging.LogRecord("", 0, "", 0, "", None, None).__dict__
) | {"message", "asctime"}


class _JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "time": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "msg": record.getMessage(),
        }
        for key, value in record.__dict__.items():
            if key not in _STANDARD_ATTRS:
                entry[key] = value
        if record.exc_info:
            entry["exc"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


def _make_logger() -> logging.Logger:
    logger = logging.getLogger("gadflow")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(_JsonFormatter())
    logger.addHandler(handler)
    logger.setLevel(logging.INFO)
    logger.propagate = False
    return logger


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Load configuration and serve the API; returns a process exit status."""
    parser = argparse.ArgumentParser(prog="gadflow", description="Serve the workflow API.")
    parser.add_argument("--env-file", default=".env", help="dotenv file to read")
    args = parser.parse_args(argv)

    logger = _make_logger()

    try:
        cfg = configure(args.env_file)
        port = int(cfg.http.port)
    except (OSError, ValueError) as exc:
        logger.error("failed to load configurations", extra={"err": str(exc)})
        return 1

    app = create_app(logger)
    address = f"{cfg.http.address}:{cfg.http.port}"
    logger.info("starting server", extra={"address": address})
    try:
        app.run(host=cfg.http.address, port=port)
    except OSError as exc:
        logger.error("failed to start server", extra={"err": str(exc)})
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())