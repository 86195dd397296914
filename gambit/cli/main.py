from __future__ import annotations

import argparse
from typing import List, Optional

import uvicorn

from gambit.config import Settings
from gambit.protocol.http.app import create_app


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Run the Gambit chess HTTP server")
    parser.add_argument("--host", type=str, default=None, help="Bind address")
    parser.add_argument("--port", type=int, default=None, help="Bind port")
    parser.add_argument(
        "--log-level",
        type=str.upper,
        choices=("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"),
        default=None,
        help="Logging level",
    )
    parser.add_argument(
        "--difficulty",
        choices=("easy", "medium", "hard"),
        default=None,
        help="Default engine difficulty for new games",
    )
    return parser.parse_args(argv)


def load_settings(args: argparse.Namespace) -> Settings:
    settings = Settings.from_env()
    overrides = {
        "host": args.host,
        "port": args.port,
        "log_level": args.log_level,
        "default_difficulty": args.difficulty,
    }
    # model_copy would skip validation
    values = settings.model_dump()
    values.update({k: v for k, v in overrides.items() if v is not None})
    return Settings(**values)


def main(argv: Optional[List[str]] = None) -> None:
    settings = load_settings(parse_args(argv))
    uvicorn.run(
        create_app(settings),
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
