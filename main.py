"""
Ride booking bot entry point.

Serves the WhatsApp webhook with uvicorn, or runs the offline console
conversation for development.

Usage:
    Webhook server: python main.py serve [--host 0.0.0.0] [--port 8000]
    Console mode:   python main.py console
"""

import argparse
import logging

from src.config import settings

logger = logging.getLogger(__name__)


def _run_server(host: str, port: int) -> None:
    """Start the FastAPI webhook (requires WhatsApp credentials to send replies)."""
    import uvicorn

    from src.api.webhook import build_conversation, create_app

    app = create_app(
        build_conversation(settings),
        verify_token=settings.whatsapp.verify_token,
        title=settings.app_name,
    )
    logger.info("Starting webhook server on %s:%d", host, port)
    uvicorn.run(app, host=host, port=port, log_level=settings.log_level.lower())


def _run_console_mode() -> None:
    """Start the offline console demo (no API keys required)."""
    import asyncio

    from console_demo import ConsoleSession

    asyncio.run(ConsoleSession().run())


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Ride booking WhatsApp bot")
    parser.add_argument("mode", nargs="?", choices=["serve", "console"], default="serve")
    parser.add_argument("--host", default="0.0.0.0")
    parser.add_argument("--port", type=int, default=8000)
    args = parser.parse_args()

    if args.mode == "console":
        _run_console_mode()
    else:
        _run_server(args.host, args.port)
