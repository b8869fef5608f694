#!/usr/bin/env python3
"""
Run the gRPC storage server over one of the local backends.

Usage:
  python scripts/run_storage_server.py [--listen [::]:50051] [--backend sql]
"""
from __future__ import annotations

import argparse
import logging
import signal
import sys
import threading
from pathlib import Path

# Make the persondir package importable when run directly
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from persondir.core.config import get_settings
from persondir.core.logging import configure_logging
from persondir.repositories import build_repository
from persondir.rpc.server import serve

logger = logging.getLogger("storage_server")

SHUTDOWN_GRACE_SECONDS = 5

# the server stores locally; a grpc backend would make it a client of itself
SERVER_BACKENDS = ("memory", "redis", "sql")


def main(argv: list[str] | None = None, stop: threading.Event | None = None) -> None:
    settings = get_settings()
    default_backend = settings.storage_backend
    if default_backend == "grpc":
        # STORAGE_BACKEND=grpc is the HTTP side setting of the same deployment
        default_backend = "sql"
    ap = argparse.ArgumentParser(description="Serve person storage over gRPC")
    ap.add_argument("--listen", default=settings.storage_grpc_listen, help="listen address (host:port)")
    ap.add_argument(
        "--backend",
        default=default_backend,
        choices=SERVER_BACKENDS,
        help="backend the server stores into",
    )
    args = ap.parse_args(argv)
    if args.backend not in SERVER_BACKENDS:
        ap.error(f"STORAGE_BACKEND={args.backend!r} cannot back the storage server; use one of {', '.join(SERVER_BACKENDS)}")
    configure_logging(settings.log_level)

    repository = build_repository(settings, backend=args.backend)
    server = serve(repository, args.listen)

    if stop is None:
        stop = threading.Event()

    def _on_signal(signum, _frame):
        logger.info("received signal %s, shutting down", signum)
        stop.set()

    signal.signal(signal.SIGINT, _on_signal)
    signal.signal(signal.SIGTERM, _on_signal)
    stop.wait()
    # in-flight calls get the grace period before the listener closes
    server.stop(SHUTDOWN_GRACE_SECONDS).wait()
    repository.close()
    logger.info("storage server stopped")


if __name__ == "__main__":
    main()
