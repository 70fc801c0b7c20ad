"""Command line entry point: ``python -m queryproxy`` or ``queryproxy``."""

import argparse
import os
from typing import List, Optional

import uvicorn

from .config.models import CONFIG_PATH_ENV, ProxyConfig


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="queryproxy",
        description="Run the QueryProxy HTTP server",
    )
    parser.add_argument("--host", help="Bind address (default from config)")
    parser.add_argument("--port", type=int, help="Bind port (default from config or $PORT)")
    parser.add_argument("--config", help="Path to a YAML configuration file")
    parser.add_argument("--reload", action="store_true", help="Reload on code changes")
    return parser


def main(argv: Optional[List[str]] = None) -> None:
    args = build_parser().parse_args(argv)

    if args.config:
        # The app factory runs in the server process and reads it from here.
        os.environ[CONFIG_PATH_ENV] = args.config
    config = ProxyConfig.load(args.config)

    uvicorn.run(
        "queryproxy.api.app:create_app",
        factory=True,
        host=args.host or config.server.host,
        port=args.port or config.server.port,
        reload=args.reload,
        log_config=None,
    )


if __name__ == "__main__":
    main()
