#!/usr/bin/env python
"""
Charge inactivity decay to every user without waiting for their next visit.

Usage:
    python -m scripts.apply_decay [--date YYYY-MM-DD]

Environment variables:
    DATABASE_URL       (optional – defaults match app.py)
"""

from __future__ import annotations

import argparse
import sys
from datetime import date
from typing import Dict, Optional

from dateutil import parser as date_parser

from app import create_app
from extensions import db
from goguma.service import apply_inactivity_penalty, today
from models import User


def sweep_inactive_users(on_date: date) -> Dict[str, int]:
    """Run the decay engine for every user; must be called inside an app context."""
    user_ids = [row.id for row in db.session.query(User.id).order_by(User.id.asc()).all()]

    penalised = 0
    unchanged = 0
    for user_id in user_ids:
        if apply_inactivity_penalty(user_id, on_date):
            print(f"  • Decayed gogumas of user {user_id}")
            penalised += 1
        else:
            unchanged += 1

    return {"users": len(user_ids), "penalised": penalised, "unchanged": unchanged}


def _parse_date(raw: Optional[str]) -> Optional[date]:
    if not raw:
        return None
    try:
        return date_parser.isoparse(raw).date()
    except (ValueError, OverflowError) as exc:
        raise SystemExit(f"Invalid --date value {raw!r}: {exc}") from exc


def main(argv=None, app=None) -> Dict[str, int]:
    args_parser = argparse.ArgumentParser(description=__doc__.strip().splitlines()[0])
    args_parser.add_argument("--date", help="UTC calendar date to evaluate (default: today)")
    args = args_parser.parse_args(argv)

    app = app or create_app()
    with app.app_context():
        on_date = _parse_date(args.date) or today()
        print(f"🔍 Applying inactivity decay for {on_date.isoformat()}...")
        summary = sweep_inactive_users(on_date)

    print("\n✅ Decay sweep complete.")
    print(f"    Users checked: {summary['users']}")
    print(f"    Penalised:     {summary['penalised']}")
    print(f"    Unchanged:     {summary['unchanged']}")
    return summary


if __name__ == "__main__":
    try:
        main()
    except KeyboardInterrupt:
        sys.exit("\n⚠️ Decay sweep cancelled by user.")
