"""
Database models for the ValueBet Oracle
SQLAlchemy ORM over a local SQLite file
"""

import enum
import logging
import os
from datetime import datetime, timezone

from dotenv import load_dotenv
from sqlalchemy import (
    Column,
    DateTime,
    Float,
    Integer,
    String,
    Text,
    create_engine,
)
from sqlalchemy.orm import declarative_base, sessionmaker

load_dotenv()

logger = logging.getLogger(__name__)

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///oracle.db")

#: The bankroll table holds exactly one row with this primary key.
BANKROLL_ID = 1


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _default_bankroll() -> float:
    return float(os.getenv("STARTING_BANKROLL", "1000"))


def build_engine(url: str = DATABASE_URL, **kwargs):
    """Create an engine; SQLite connections are shared with FastAPI's threadpool."""
    if url.startswith("sqlite"):
        kwargs.setdefault("connect_args", {"check_same_thread": False})
    return create_engine(url, echo=False, **kwargs)


engine = build_engine()
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
Base = declarative_base()


# Dependency for FastAPI
def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


class BetStatus(str, enum.Enum):
    """Bet lifecycle: ``pending`` moves exactly once to a terminal state."""

    PENDING = "pending"
    WIN = "win"
    LOSS = "loss"
    VOID = "void"

    @property
    def is_terminal(self) -> bool:
        return self is not BetStatus.PENDING


class Bankroll(Base):
    """Singleton balance row (id fixed at 1)"""

    __tablename__ = "bankroll"

    id = Column(Integer, primary_key=True)
    amount = Column(Float, nullable=False, default=1000.0)
    initial_amount = Column(Float, nullable=False, default=1000.0)  # ROI baseline


class Bet(Base):
    """A placed bet and its settlement status"""

    __tablename__ = "bets"

    id = Column(Integer, primary_key=True, autoincrement=True, index=True)
    event = Column(String, nullable=False)   # "Arsenal vs Chelsea"
    market = Column(String, nullable=False)  # "h2h: Arsenal"
    odds = Column(Float, nullable=False)     # Decimal odds taken
    fair_odds = Column(Float, nullable=False)
    edge = Column(Float, nullable=False)     # Percent, as supplied by the client
    stake = Column(Float, nullable=False)
    status = Column(String, nullable=False, default=BetStatus.PENDING.value, index=True)
    created_at = Column(DateTime, default=_utcnow, index=True)


class LearningLog(Base):
    """Per-team variance notes. Persisted for schema compatibility only."""

    __tablename__ = "learning_log"

    id = Column(Integer, primary_key=True, autoincrement=True)
    league = Column(String)
    team = Column(String)
    variance_adjustment = Column(Float, default=0.0)
    notes = Column(Text)


def seed_bankroll(db, amount: float = None) -> Bankroll:
    """Insert the singleton bankroll row if it does not exist yet (flush only)."""
    row = db.get(Bankroll, BANKROLL_ID)
    if row is None:
        amount = _default_bankroll() if amount is None else amount
        row = Bankroll(id=BANKROLL_ID, amount=amount, initial_amount=amount)
        db.add(row)
        db.flush()
        logger.info("Bankroll seeded with %.2f", amount)
    return row


# Create all tables
def init_db(bind=None):
    """Create tables and seed the bankroll row on first run"""
    bind = bind or engine
    Base.metadata.create_all(bind=bind)
    db = sessionmaker(bind=bind)()
    try:
        seed_bankroll(db)
        db.commit()
    finally:
        db.close()
    logger.info("Database ready: %s", bind.url)


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    init_db()
