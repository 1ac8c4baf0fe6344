"""
Worker Service - 主入口

在节点上启动远程命令执行服务：

    conductor-worker <hostname> [port]
"""

import argparse
import sys
from typing import Optional, Sequence

import uvicorn
from loguru import logger
from pydantic import ValidationError

from core.config import get_settings
from core.utils import validate_hostname, validate_port
from core.utils.logger import setup_logger
from .app import create_app


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="conductor-worker",
        description="Serve the remote command execution endpoint on this node",
    )
    parser.add_argument("hostname", help="Name this worker reports to the coordinator")
    parser.add_argument("port", nargs="?", help="Port to listen on (default: from settings)")
    parser.add_argument("--bind", default="0.0.0.0", help="Interface to bind (default: 0.0.0.0)")
    parser.add_argument("--service", help="Service name used as URL prefix")
    parser.add_argument("--cwd", help="Default working directory for commands")
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Worker 服务主入口"""
    args = build_parser().parse_args(argv)

    try:
        settings = get_settings()
    except ValidationError as e:
        logger.error(f"✗ Invalid settings: {e}")
        return 1

    setup_logger(settings.LOG_LEVEL, settings.LOG_FILE)

    try:
        validate_hostname(args.hostname)
        port = validate_port(args.port if args.port is not None else settings.DEFAULT_PORT)
    except ValueError as e:
        logger.error(f"✗ {e}")
        return 1

    service_name = args.service or settings.WORKER_SERVICE_NAME

    logger.info("=" * 70)
    logger.info("💪 Conductor Worker Service")
    logger.info("=" * 70)
    logger.info(f"Hostname: {args.hostname}")
    logger.info(f"Listening: {args.bind}:{port}")
    logger.info(f"Endpoint: /{service_name}/execute")
    logger.info("-" * 70)

    app = create_app(
        args.hostname,
        service_name=service_name,
        default_cwd=args.cwd,
        command_timeout=settings.REMOTE_TIMEOUT,
    )

    try:
        uvicorn.run(app, host=args.bind, port=port, log_level=settings.LOG_LEVEL.lower())
    except KeyboardInterrupt:
        logger.info("⚠️  Worker interrupted by user")
    finally:
        logger.info("✅ Worker stopped")
    return 0


if __name__ == "__main__":
    sys.exit(main())
