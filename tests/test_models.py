"""Tests for schema bootstrap and model defaults."""

from sqlalchemy import create_engine, inspect
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from valuebet.models import Bankroll, BetStatus, LearningLog, build_engine, init_db


def _memory_engine():
    return create_engine("sqlite://", poolclass=StaticPool, connect_args={"check_same_thread": False})


def test_init_db_creates_tables_and_seeds(monkeypatch):
    monkeypatch.setenv("STARTING_BANKROLL", "750")
    eng = _memory_engine()

    init_db(bind=eng)

    assert set(inspect(eng).get_table_names()) >= {"bankroll", "bets", "learning_log"}
    session = sessionmaker(bind=eng)()
    try:
        bankroll = session.get(Bankroll, 1)
        assert (bankroll.amount, bankroll.initial_amount) == (750.0, 750.0)
    finally:
        session.close()


def test_init_db_is_idempotent():
    eng = _memory_engine()
    init_db(bind=eng)

    session = sessionmaker(bind=eng)()
    session.get(Bankroll, 1).amount = 42.0
    session.commit()
    session.close()

    init_db(bind=eng)

    session = sessionmaker(bind=eng)()
    try:
        assert session.query(Bankroll).count() == 1
        assert session.get(Bankroll, 1).amount == 42.0
    finally:
        session.close()


def test_learning_log_round_trip(db):
    db.add(LearningLog(league="EPL", team="Arsenal", notes="High variance away"))
    db.commit()

    row = db.query(LearningLog).one()
    assert row.variance_adjustment == 0.0
    assert row.team == "Arsenal"


def test_bet_status_terminal():
    assert not BetStatus.PENDING.is_terminal
    assert all(s.is_terminal for s in (BetStatus.WIN, BetStatus.LOSS, BetStatus.VOID))


def test_build_engine_sqlite():
    eng = build_engine("sqlite://")
    assert eng.dialect.name == "sqlite"
    eng.dispose()
