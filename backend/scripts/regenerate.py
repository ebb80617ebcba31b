#!/usr/bin/env python
"""Rebuild derived rows from the stored facts.

Safe to run repeatedly: every entity's rows are replaced, never appended.
Entities that fail keep their previous rows and are listed at the end.

Usage:
    python -m scripts.regenerate contracts
    python -m scripts.regenerate instruments
    python -m scripts.regenerate index IPC
    python -m scripts.regenerate index FX_USD_ARS
"""

import argparse
import sys

from database import get_session_local
from logging_config import setup_logging
from services.regeneration_service import (
    AllContractsScope,
    AllInstrumentsScope,
    IndexDependentScope,
    RegenerationService,
)


def regenerate(target: str, index_type: str | None = None) -> int:
    """Run one regeneration batch and commit it. Returns the failure count."""
    if target == "contracts":
        scope = AllContractsScope()
    elif target == "instruments":
        scope = AllInstrumentsScope()
    else:
        scope = IndexDependentScope(index_type.upper())

    SessionLocal = get_session_local()
    db = SessionLocal()
    try:
        result = RegenerationService().regenerate(db, scope)
        db.commit()

        print(f"Regenerated {len(result.regenerated)} entities ({result.rows_written} rows)")
        if result.failures:
            print(f"\n{len(result.failures)} failed (previous rows kept):")
            for failure in result.failures:
                print(f"  - {failure.entity_type} {failure.entity_id}: {failure.cause}")
        return len(result.failures)
    except Exception as e:
        db.rollback()
        print(f"Error: {e}")
        raise
    finally:
        db.close()


if __name__ == "__main__":
    setup_logging()
    parser = argparse.ArgumentParser(description="Regenerate derived cashflows and positions")
    subparsers = parser.add_subparsers(dest="target", required=True)
    subparsers.add_parser("contracts", help="Every rental contract schedule")
    subparsers.add_parser("instruments", help="Every instrument's lots, gains and cashflows")
    index_parser = subparsers.add_parser("index", help="Contracts that read one index series")
    index_parser.add_argument("index_type", help="Index type, e.g. IPC or FX_USD_ARS")
    args = parser.parse_args()

    failed = regenerate(args.target, getattr(args, "index_type", None))
    sys.exit(1 if failed else 0)
