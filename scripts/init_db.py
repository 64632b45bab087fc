#!/usr/bin/env python3
"""
Database initialization script
Creates the rating ledger tables and optionally seeds a demo participant
"""

import argparse
import logging

from dotenv import load_dotenv
load_dotenv()

from sqlalchemy import inspect

from rightcall.models import Base, engine, SessionLocal
from rightcall.services.rating_ledger import get_or_create_participant

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def init_database(drop_existing: bool = False):
    """
    Initialize database tables

    Args:
        drop_existing: If True, drops all tables first (DANGER: data loss!)
    """
    logger.info("Initializing RightCall database...")

    if drop_existing:
        logger.warning("Dropping all existing tables!")
        response = input("Are you sure? This will delete all ratings. Type 'yes' to confirm: ")
        if response.lower() != 'yes':
            logger.info("Aborted.")
            return False

        Base.metadata.drop_all(bind=engine)
        logger.info("Existing tables dropped")

    Base.metadata.create_all(bind=engine)

    tables = inspect(engine).get_table_names()
    logger.info("Tables: %s", ", ".join(tables))
    return True


def seed_demo_participant(name: str = "demo"):
    """Create a participant at the base rating for local testing"""
    db = SessionLocal()
    try:
        participant = get_or_create_participant(db, name)
        logger.info("Participant %s @ %d", participant.name, participant.rating)
    finally:
        db.close()


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Initialize the RightCall database")
    parser.add_argument("--drop", action="store_true", help="Drop existing tables first")
    parser.add_argument("--seed", action="store_true", help="Create a demo participant")
    args = parser.parse_args()

    if init_database(drop_existing=args.drop) and args.seed:
        seed_demo_participant()
