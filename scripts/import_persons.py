#!/usr/bin/env python3
"""
Reconcile an `id,name` CSV file into the configured backend.

Usage:
  python scripts/import_persons.py persons.csv [--backend grpc]
"""
from __future__ import annotations

import argparse
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from persondir.core.config import get_settings
from persondir.core.logging import configure_logging
from persondir.domain.persons import PersonError
from persondir.repositories import BACKENDS, build_repository
from persondir.services.person_service import PersonService


def main() -> None:
    settings = get_settings()
    ap = argparse.ArgumentParser(description="Import persons from CSV")
    ap.add_argument("path", help="CSV file with header id,name")
    ap.add_argument("--backend", default=settings.storage_backend, choices=BACKENDS)
    args = ap.parse_args()
    configure_logging(settings.log_level)

    path = Path(args.path)
    if not path.exists():
        raise SystemExit(f"File not found: {path}")
    service = PersonService(build_repository(settings, backend=args.backend))
    try:
        with path.open("rb") as f:
            result = service.process_csv(f)
    except PersonError as exc:
        raise SystemExit(f"Import failed: {exc.message}") from exc
    finally:
        service.repository.close()
    print("OK: csv imported")
    print(f"  updated: {result.updated}")
    print(f"  created: {result.created}")


if __name__ == "__main__":
    main()
