#!/usr/bin/env python3
"""
Dump every person of the configured backend as CSV.

Usage:
  python scripts/export_persons.py [--output persons.csv] [--backend redis]
"""
from __future__ import annotations

import argparse
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from persondir.core.config import get_settings
from persondir.domain.persons import PersonError
from persondir.repositories import BACKENDS, build_repository
from persondir.services.person_service import PersonService


def main() -> None:
    settings = get_settings()
    ap = argparse.ArgumentParser(description="Export persons to CSV")
    ap.add_argument("--output", help="destination file (default: stdout)")
    ap.add_argument("--backend", default=settings.storage_backend, choices=BACKENDS)
    args = ap.parse_args()

    service = PersonService(build_repository(settings, backend=args.backend))
    try:
        payload = service.download_persons_csv()
    except PersonError as exc:
        raise SystemExit(f"Export failed: {exc.message}") from exc
    finally:
        service.repository.close()
    if args.output:
        Path(args.output).write_bytes(payload)
    else:
        sys.stdout.buffer.write(payload)


if __name__ == "__main__":
    main()
