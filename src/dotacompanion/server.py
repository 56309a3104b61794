"""
Dota Companion Web Server Entry Point

Provides the `dotacompanion-web` command to start the FastAPI server.

Usage:
    dotacompanion-web                    # Start on the configured port (PORT, default 5000)
    dotacompanion-web --port 8000        # Start on custom port
    dotacompanion-web --host 127.0.0.1   # Bind to localhost only
    dotacompanion-web --reload           # Enable auto-reload for development
"""

import argparse
import logging

import uvicorn

from dotacompanion.core.config import configure_logging, load_config

logger = logging.getLogger(__name__)


def main() -> None:
    """Start the Dota Companion web server."""
    config = load_config()
    configure_logging(config.logging)

    parser = argparse.ArgumentParser(
        description="Dota Companion - Web Server",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    dotacompanion-web                     Start server on http://0.0.0.0:5000
    dotacompanion-web --port 8000         Start on port 8000
    dotacompanion-web --host 127.0.0.1    Bind to localhost only
    dotacompanion-web --reload            Enable auto-reload (development)
        """,
    )
    parser.add_argument(
        "--host",
        default=config.server.host,
        help=f"Host to bind to (default: {config.server.host})",
    )
    parser.add_argument(
        "--port",
        type=int,
        default=config.server.port,
        help=f"Port to bind to (default: {config.server.port})",
    )
    parser.add_argument(
        "--reload",
        action="store_true",
        help="Enable auto-reload for development",
    )
    parser.add_argument(
        "--workers",
        type=int,
        default=1,
        help="Number of worker processes (default: 1)",
    )
    parser.add_argument(
        "--log-level",
        default="info",
        choices=["debug", "info", "warning", "error", "critical"],
        help="Log level (default: info)",
    )

    args = parser.parse_args()

    logger.info("Starting Dota Companion web server on http://%s:%s", args.host, args.port)
    logger.info("Press Ctrl+C to stop")

    uvicorn.run(
        "dotacompanion.api:create_app",
        factory=True,
        host=args.host,
        port=args.port,
        reload=args.reload,
        workers=args.workers if not args.reload else 1,
        log_level=args.log_level,
    )


if __name__ == "__main__":
    main()
