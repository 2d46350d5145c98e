#!/usr/bin/env python
"""Run the etude server.

Usage
-----
    # Defaults from the environment / .env (ETUDE_* variables)
    python scripts/serve_etudes.py

    # Listen on all interfaces, regenerate etudes hourly
    python scripts/serve_etudes.py --host 0.0.0.0 --port 8080 --max-age 3600

    # Keep artifacts in memory only (nothing written to disk)
    python scripts/serve_etudes.py --store memory --log-level debug

Command-line flags override the corresponding ETUDE_* variables.

Exit codes
----------
    0  — server stopped normally
    2  — invalid configuration
"""

from __future__ import annotations

import argparse
import dataclasses
import logging
import os
import sys
from pathlib import Path

# Add project root to sys.path
sys.path.insert(0, str(Path(__file__).parent.parent))

from dotenv import load_dotenv  # noqa: E402

load_dotenv()

import uvicorn  # noqa: E402

from api import deps  # noqa: E402
from api.main import app  # noqa: E402
from core.config import VALID_STORE_BACKENDS, config_from_env  # noqa: E402
from infrastructure.log_config import configure_logging, parse_level  # noqa: E402

logger = logging.getLogger("serve_etudes")


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Serve generated etudes as MIDI files")
    p.add_argument("--host", default="127.0.0.1", help="Interface to bind (default: 127.0.0.1)")
    p.add_argument("--port", type=int, default=8000, help="Port to listen on (default: 8000)")
    p.add_argument(
        "--max-age",
        type=float,
        metavar="SECONDS",
        help="Regenerate stored etudes older than this (default: ETUDE_MAX_AGE_SECONDS or 1 day)",
    )
    p.add_argument(
        "--artifact-dir",
        type=Path,
        metavar="DIR",
        help="Directory for published MIDI files (file store only)",
    )
    p.add_argument(
        "--store",
        choices=sorted(VALID_STORE_BACKENDS),
        help="Artifact store backend",
    )
    p.add_argument("--log-level", default="info", help="Logging level (default: info)")
    return p.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)

    try:
        configure_logging(parse_level(args.log_level))
        config = config_from_env(os.environ)
        overrides: dict[str, object] = {}
        if args.max_age is not None:
            overrides["max_age_seconds"] = args.max_age
        if args.artifact_dir is not None:
            overrides["artifact_dir"] = args.artifact_dir
        if args.store is not None:
            overrides["store_backend"] = args.store
        if overrides:
            config = dataclasses.replace(config, **overrides)
    except ValueError as exc:
        print(f"serve_etudes: {exc}", file=sys.stderr)
        return 2

    deps.configure(config)
    logger.info("Serving etudes on http://%s:%d/etude/", args.host, args.port)
    uvicorn.run(app, host=args.host, port=args.port, log_config=None)
    return 0


if __name__ == "__main__":
    sys.exit(main())
