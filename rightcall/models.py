"""
Database models for the RightCall rating ledger
SQLAlchemy ORM (SQLite by default, any SQLAlchemy URL via DATABASE_URL)
"""

from sqlalchemy import (
    create_engine,
    Column,
    Integer,
    String,
    DateTime,
    ForeignKey,
    UniqueConstraint,
)
from sqlalchemy.orm import declarative_base, sessionmaker, relationship
from datetime import datetime
import os
from dotenv import load_dotenv

from rightcall.core.rating import BASE_RATING

load_dotenv()

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./rightcall.db")

_connect_args = {"check_same_thread": False} if DATABASE_URL.startswith("sqlite") else {}

engine = create_engine(DATABASE_URL, pool_pre_ping=True, echo=False, connect_args=_connect_args)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
Base = declarative_base()


# Dependency for FastAPI
def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


class Participant(Base):
    """A player whose picks are rated"""

    __tablename__ = "participants"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, unique=True, nullable=False, index=True)
    rating = Column(Integer, nullable=False, default=BASE_RATING)

    applications = relationship("RatingApplication", back_populates="participant")

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)


class RatingApplication(Base):
    """One applied slate delta.  The unique constraint is what makes settlement at-most-once."""

    __tablename__ = "rating_applications"

    id = Column(Integer, primary_key=True, index=True)
    participant_id = Column(Integer, ForeignKey("participants.id"), nullable=False, index=True)
    slate_id = Column(String, nullable=False, index=True)  # e.g. "2025-w6-st2" or "20251012"

    delta = Column(Integer, nullable=False)
    picks_settled = Column(Integer, nullable=False, default=0)
    picks_won = Column(Integer, nullable=False, default=0)
    display_points = Column(Integer, nullable=False, default=0)
    rating_before = Column(Integer, nullable=False)
    rating_after = Column(Integer, nullable=False)

    applied_at = Column(DateTime, default=datetime.utcnow, index=True)

    participant = relationship("Participant", back_populates="applications")

    __table_args__ = (
        UniqueConstraint("participant_id", "slate_id", name="_participant_slate_uc"),
    )


def init_db(bind=None):
    """Initialize database tables"""
    Base.metadata.create_all(bind=bind or engine)


if __name__ == "__main__":
    init_db()
    print("Database tables created")
