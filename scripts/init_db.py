#!/usr/bin/env python3
"""
Bootstrap the ValueBet Oracle database.

    python scripts/init_db.py                       # create tables, seed bankroll
    python scripts/init_db.py --check               # connectivity + current state
    python scripts/init_db.py --reset-bankroll 500  # restart ROI from 500
    python scripts/init_db.py --drop                # wipe everything first
"""

import argparse
import logging
import os
import sys

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from dotenv import load_dotenv
load_dotenv()

from sqlalchemy import inspect, text
from sqlalchemy.exc import SQLAlchemyError

from valuebet.core.odds_math import roi_pct
from valuebet.models import Base, Bet, SessionLocal, engine, init_db
from valuebet.services.ledger import BankrollLedger

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger("init_db")


def drop_schema(assume_yes: bool = False) -> bool:
    """Drop every table after an interactive confirmation."""
    if not assume_yes:
        answer = input(f"Drop all tables in {engine.url}? Every bet will be lost. [yes/N] ")
        if answer.strip().lower() != "yes":
            logger.info("Drop cancelled")
            return False
    Base.metadata.drop_all(bind=engine)
    logger.warning("All tables dropped from %s", engine.url)
    return True


def report_state() -> None:
    """Log tables, bankroll and bet count."""
    tables = sorted(inspect(engine).get_table_names())
    logger.info("Tables: %s", ", ".join(tables) or "(none)")
    if "bankroll" not in tables:
        logger.info("Schema not created yet; run without --check")
        return

    db = SessionLocal()
    try:
        bankroll = BankrollLedger(db).read()
        logger.info(
            "Bankroll %.2f (baseline %.2f, ROI %+.2f%%), %d bets logged",
            bankroll.amount,
            bankroll.initial_amount,
            roi_pct(bankroll.amount, bankroll.initial_amount),
            db.query(Bet).count(),
        )
        db.rollback()
    finally:
        db.close()


def database_reachable() -> bool:
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
    except SQLAlchemyError as e:
        logger.error("Cannot reach %s: %s", engine.url, e)
        return False
    return True


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Initialize the ValueBet Oracle database")
    parser.add_argument("--check", action="store_true", help="Only check connectivity and report state")
    parser.add_argument("--drop", action="store_true", help="Drop all tables before creating them")
    parser.add_argument("--yes", action="store_true", help="Skip the --drop confirmation prompt")
    parser.add_argument("--reset-bankroll", type=float, metavar="AMOUNT",
                        help="Set balance and ROI baseline to AMOUNT")
    args = parser.parse_args(argv)

    if not database_reachable():
        return 1

    if args.check:
        report_state()
        return 0

    if args.drop and not drop_schema(assume_yes=args.yes):
        return 1

    init_db()

    if args.reset_bankroll is not None:
        db = SessionLocal()
        try:
            BankrollLedger(db).reset(args.reset_bankroll)
        finally:
            db.close()

    report_state()
    return 0


if __name__ == "__main__":
    sys.exit(main())
