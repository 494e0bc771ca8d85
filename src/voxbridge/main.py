"""
Command-line entry point: serve the relay API with Uvicorn.
"""

import argparse
import logging
from pathlib import Path
from typing import Optional, Sequence

import uvicorn

from .config import RelaySettings
from .server import RelayServer

logger = logging.getLogger("voxbridge")


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(
        prog="voxbridge",
        description="Voice translation chat relay",
    )
    p.add_argument("--host", help="bind address (default from VOXBRIDGE_HOST)")
    p.add_argument("--port", type=int, help="port (default from VOXBRIDGE_PORT)")
    p.add_argument("--data-dir", type=Path, help="conversation storage directory")
    p.add_argument("--log-level", help="DEBUG, INFO, WARNING, ...")
    return p.parse_args(argv)


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = parse_args(argv)
    settings = RelaySettings.from_env(
        host=args.host,
        port=args.port,
        data_dir=args.data_dir,
        log_level=args.log_level,
    )

    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logger.info("Data path: %s", settings.data_dir.resolve())

    server = RelayServer.from_settings(settings)
    logger.info("TTS tiers: %s", ", ".join(server.orchestrator.voice.tiers))

    uvicorn.run(
        server.app,
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
