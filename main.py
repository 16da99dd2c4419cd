#!/usr/bin/env python3
"""
ItemKeeper -- personal item lists behind session authentication.

Usage:
  python main.py
  python main.py --host 0.0.0.0 --port 9000
  python main.py --reload

Environment variables (or .env):
  SECRET_KEY     Session signing key, at least 32 characters. Required unless DEBUG=true.
  DEBUG          true generates a throwaway SECRET_KEY for local development.
  DATABASE_URL   SQLAlchemy URL (default: sqlite:///itemkeeper.db).
  SERVER_HOST / SERVER_PORT   Defaults for --host / --port.
"""

import argparse

import uvicorn

from core.config import get_settings


def main() -> None:
    settings = get_settings()
    parser = argparse.ArgumentParser(
        prog="itemkeeper",
        description="Run the ItemKeeper web application.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python main.py
  python main.py --port 9000
  DEBUG=true python main.py --reload
        """,
    )
    parser.add_argument(
        "--host",
        default=settings.server_host,
        help=f"Interface to bind (default: {settings.server_host})",
    )
    parser.add_argument(
        "--port",
        type=int,
        default=settings.server_port,
        help=f"Port to listen on (default: {settings.server_port})",
    )
    parser.add_argument(
        "--reload",
        action="store_true",
        help="Restart the server when source files change (development only)",
    )
    args = parser.parse_args()

    print(f"ItemKeeper running at http://{args.host}:{args.port}")
    uvicorn.run("asgi:app", host=args.host, port=args.port, reload=args.reload)


if __name__ == "__main__":
    main()
