#!/usr/bin/env python3
"""
Region 1 Projects: launch the data service.

Usage:
    python main.py                          # http://127.0.0.1:5000
    python main.py --port 9000              # http://127.0.0.1:9000
    python main.py --host 0.0.0.0           # bind to all interfaces
    python main.py --db /path/to/projects.sqlite
    python main.py --reload                 # auto-reload on code changes
"""

from __future__ import annotations

import argparse
import os
import sys
from pathlib import Path

from utils.config import AppConfig


def main() -> None:
    cfg = AppConfig.from_env()
    parser = argparse.ArgumentParser(
        description="Launch the Region 1 project data service.",
    )
    parser.add_argument(
        "--host", default=cfg.api_host,
        help=f"Bind address (default: {cfg.api_host} or APP_HOST env var)",
    )
    parser.add_argument(
        "--port", type=int, default=cfg.api_port,
        help=f"Port to listen on (default: {cfg.api_port} or APP_PORT env var)",
    )
    parser.add_argument(
        "--db", type=Path, default=None,
        help="Path to SQLite database (default: projects.sqlite or APP_DB_PATH env var)",
    )
    parser.add_argument(
        "--reload", action="store_true",
        help="Enable auto-reload on file changes (development mode)",
    )
    args = parser.parse_args()

    # Set DB path env var if provided via CLI
    if args.db is not None:
        os.environ["APP_DB_PATH"] = str(args.db)

    db_path = Path(os.getenv("APP_DB_PATH", str(cfg.db_path)))
    if not db_path.exists():
        print(f"Warning: Database not found at {db_path}")
        print("  Run 'python build_project_db.py --sample' to build a sample database,")
        print("  or pass --db /path/to/your/projects.sqlite")
        print()

    try:
        import uvicorn
    except ImportError:
        print("Error: uvicorn is not installed.")
        print("  pip install uvicorn[standard]")
        sys.exit(1)

    print(f"Starting Region 1 Projects API at http://{args.host}:{args.port}/api")
    print(f"Database: {db_path}")
    print()

    uvicorn.run(
        "api.app:app",
        host=args.host,
        port=args.port,
        reload=args.reload,
        log_level="info",
    )


if __name__ == "__main__":
    main()
