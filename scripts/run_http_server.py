#!/usr/bin/env python3
"""
Run the HTTP API with uvicorn.

Usage:
  python scripts/run_http_server.py [--host 0.0.0.0] [--port 8081] [--backend grpc]

uvicorn drains in-flight requests on SIGINT/SIGTERM before closing the listener.
"""
from __future__ import annotations

import argparse
import sys
from pathlib import Path

import uvicorn

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from persondir.app import create_app
from persondir.core.config import get_settings
from persondir.core.logging import configure_logging
from persondir.repositories import BACKENDS, build_repository
from persondir.services.person_service import PersonService


def main(argv: list[str] | None = None) -> None:
    settings = get_settings()
    ap = argparse.ArgumentParser(description="Serve the person directory over HTTP")
    ap.add_argument("--host", default=settings.http_host)
    ap.add_argument("--port", type=int, default=settings.http_port)
    ap.add_argument("--backend", default=settings.storage_backend, choices=BACKENDS)
    args = ap.parse_args(argv)
    configure_logging(settings.log_level)

    app = create_app(PersonService(build_repository(settings, backend=args.backend)))
    uvicorn.run(app, host=args.host, port=args.port, log_config=None)


if __name__ == "__main__":
    main()
