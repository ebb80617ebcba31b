#!/usr/bin/env python
"""Load index points from a CSV file and regenerate dependent contracts.

Each line is ``YYYY-MM[-DD],value[,interannual]``. Values may carry a ``%``
sign and a decimal comma (``"2,7%"``). Monthly series are stored on the first
of the month. Imported points are marked as scraped, so a value entered by
hand is kept unless ``--force`` is given.

Usage:
    python -m scripts.import_index_csv IPC ipc.csv
    python -m scripts.import_index_csv IPC ipc.csv --dry-run
    python -m scripts.import_index_csv FX_USD_ARS rates.csv --force
"""

import argparse
import csv
from datetime import date
from decimal import Decimal, InvalidOperation

from pydantic import ValidationError

from database import get_session_local
from logging_config import setup_logging
from schemas.index_point import IndexPointCreate
from services.index_point_service import IndexPointService
from services.regeneration_service import IndexDependentScope, RegenerationService


def parse_number(text: str) -> Decimal:
    """Parse ``2.7``, ``2,7`` or ``"2,7%"``."""
    cleaned = text.strip().strip("\"'").replace("%", "").replace(",", ".").strip()
    try:
        return Decimal(cleaned)
    except InvalidOperation:
        raise ValueError(f"Not a number: {text!r}")


def parse_date(text: str) -> date:
    """Parse ``YYYY-MM`` (first of month) or ``YYYY-MM-DD``."""
    parts = [int(p) for p in text.strip().split("-")]
    if len(parts) == 2:
        return date(parts[0], parts[1], 1)
    if len(parts) == 3:
        return date(parts[0], parts[1], parts[2])
    raise ValueError(f"Not a date: {text!r}")


def read_rows(path: str, index_type: str) -> list[IndexPointCreate]:
    """Parse every data line of the file. Raises ValueError on a bad line."""
    rows = []
    with open(path, newline="", encoding="utf-8") as f:
        for line_no, record in enumerate(csv.reader(f), start=1):
            if not record or not record[0].strip() or record[0].startswith("#"):
                continue
            try:
                point_date = parse_date(record[0])
            except ValueError:
                if line_no == 1:
                    continue  # header
                raise
            try:
                rows.append(
                    IndexPointCreate(
                        type=index_type,
                        date=point_date,
                        value=parse_number(record[1]),
                        interannual_value=(
                            parse_number(record[2]) if len(record) > 2 and record[2].strip() else None
                        ),
                        is_manual=False,
                    )
                )
            except (IndexError, ValidationError) as e:
                raise ValueError(f"Line {line_no}: {e}")
    return rows


def import_index_csv(index_type: str, path: str, force: bool = False, dry_run: bool = False):
    """Upsert every row, then regenerate the contracts that read the series once."""
    rows = read_rows(path, index_type.upper())
    print(f"Read {len(rows)} {index_type.upper()} rows from {path}")

    SessionLocal = get_session_local()
    db = SessionLocal()

    try:
        created = updated = kept = 0
        for row in rows:
            outcome = IndexPointService.upsert(db, row, force=force)
            if outcome.created:
                created += 1
            elif outcome.kept_manual:
                kept += 1
                print(f"  Keeping manual value for {outcome.point.date}: {outcome.point.value}")
            elif outcome.changed:
                updated += 1

        if dry_run:
            db.rollback()
            print(f"\n[DRY RUN] Would create {created}, update {updated}, keep {kept} manual")
            return

        if created or updated:
            result = RegenerationService().regenerate(db, IndexDependentScope(index_type.upper()))
            print(
                f"Regenerated {len(result.regenerated_of('contract'))} contracts, "
                f"{len(result.regenerated_of('instrument'))} instruments"
            )
            for failure in result.failures:
                print(f"  - {failure}")
        db.commit()

        print("\nSummary:")
        print(f"  Created: {created}")
        print(f"  Updated: {updated}")
        print(f"  Manual values kept: {kept}")

    except Exception as e:
        db.rollback()
        print(f"Error: {e}")
        raise
    finally:
        db.close()


if __name__ == "__main__":
    setup_logging()
    parser = argparse.ArgumentParser(description="Import index points from CSV")
    parser.add_argument("index_type", help="Index type, e.g. IPC or FX_USD_ARS")
    parser.add_argument("path", help="CSV file")
    parser.add_argument("--force", action="store_true", help="Overwrite manual values")
    parser.add_argument("--dry-run", action="store_true", help="Show what would change without saving")
    args = parser.parse_args()

    import_index_csv(args.index_type, args.path, force=args.force, dry_run=args.dry_run)
