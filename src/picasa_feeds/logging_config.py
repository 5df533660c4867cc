"""Configure logging for the command line tool."""

import logging
import sys


def setup_logging(debug: bool = False) -> None:
    level = logging.DEBUG if debug else logging.INFO
    formatter = logging.Formatter(
        "%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(formatter)

    root = logging.getLogger("picasa_feeds")
    root.setLevel(level)
    # Replace the handler from an earlier call, sys.stderr may have changed
    for existing in list(root.handlers):
        root.removeHandler(existing)
    root.addHandler(handler)

    # Request lines from httpx are only useful when debugging feed URLs
    httpx_level = logging.DEBUG if debug else logging.WARNING
    logging.getLogger("httpx").setLevel(httpx_level)
    logging.getLogger("httpcore").setLevel(httpx_level)
