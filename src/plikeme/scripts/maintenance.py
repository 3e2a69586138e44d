# src/plikeme/scripts/maintenance.py
"""Operational commands for the membership tables."""
from __future__ import annotations

import argparse
import logging
import sys

from plikeme.db.session import SessionLocal
from plikeme.services.membership import reconcile_member_counts


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="P-LikeMe maintenance commands")
    subparsers = parser.add_subparsers(dest="command", required=True)

    reconcile = subparsers.add_parser(
        "reconcile",
        help="Recompute community and sub-community member counts from membership rows.",
    )
    reconcile.add_argument(
        "--community-id",
        type=int,
        default=None,
        help="Only reconcile this community (defaults to all).",
    )
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s %(message)s")

    try:
        with SessionLocal() as db:
            fixed = reconcile_member_counts(db, community_id=args.community_id)
    except Exception as exc:
        print(f"[maintenance] ERROR: {exc}", file=sys.stderr)
        return 1
    print(f"[maintenance] corrected {fixed} counter(s)")
    return 0


if __name__ == "__main__":
    sys.exit(main())
