"""Command-line interface for the mock OpenAI API server."""

import argparse
import logging
import sys

import uvicorn
from pydantic import ValidationError

from openai_mock.core.config import Settings
from openai_mock.core.logging_config import configure_logging

from .main import create_app

logger = logging.getLogger(__name__)

_OPTION_FIELDS = {
    "host": "HOST",
    "port": "PORT",
    "api_key": "API_KEY",
    "request_timeout_secs": "REQUEST_TIMEOUT_SECS",
    "enable_cors": "ENABLE_CORS",
    "enable_logging": "ENABLE_LOGGING",
    "log_level": "LOG_LEVEL",
}


def _flag(value):
    lowered = value.strip().lower()
    if lowered in ("true", "1", "yes", "on"):
        return True
    if lowered in ("false", "0", "no", "off"):
        return False
    raise argparse.ArgumentTypeError(f"expected true or false, got '{value}'")


def build_parser():
    parser = argparse.ArgumentParser(
        description="OpenAI Mock - deterministic stand-in for the OpenAI HTTP API"
    )
    parser.add_argument("--host", help="Host to bind to (default: 0.0.0.0)")
    parser.add_argument("--port", type=int, help="Port to serve on (default: 13673)")
    parser.add_argument("--api-key", help="API key clients must send as a Bearer token")
    parser.add_argument(
        "--request-timeout-secs", type=int, help="Per-request timeout in seconds (default: 30)"
    )
    parser.add_argument("--enable-cors", type=_flag, metavar="{true,false}", help="Enable CORS")
    parser.add_argument(
        "--enable-logging", type=_flag, metavar="{true,false}", help="Log every request"
    )
    parser.add_argument(
        "--log-level",
        help="Log level: trace, debug, info, warn, error or critical (default: info)",
    )
    return parser


def load_settings(argv=None) -> Settings:
    """Merge command-line options over ``OPENAI_MOCK_*`` environment settings."""

    args = build_parser().parse_args(argv)
    overrides = {
        field: getattr(args, option)
        for option, field in _OPTION_FIELDS.items()
        if getattr(args, option) is not None
    }
    return Settings(**overrides)


def main(argv=None):
    """Main CLI entry point."""
    try:
        settings = load_settings(argv)
    except ValidationError as exc:
        print(f"Invalid configuration:\n{exc}", file=sys.stderr)
        sys.exit(2)

    configure_logging(settings)
    logger.info("Starting OpenAI Mock Server...")
    logger.info("Listening on %s (%s)", settings.bind_address, settings.base_url)
    logger.info("API key: %s", settings.masked_api_key)
    logger.info(
        "CORS: %s, request logging: %s, timeout: %ss",
        settings.ENABLE_CORS,
        settings.ENABLE_LOGGING,
        settings.REQUEST_TIMEOUT_SECS,
    )

    try:
        uvicorn.run(
            create_app(settings),
            host=settings.HOST,
            port=settings.PORT,
            log_level=settings.LOG_LEVEL.lower(),
        )
    except KeyboardInterrupt:
        logger.info("Server stopped by user")


if __name__ == "__main__":
    main()
