import asyncio
from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from edutext.cleanup import purge_usage_older_than
from edutext.db import Base, make_engine
from edutext.models import GenerationLog
from edutext.usage import SqlUsageSink, UsageLogger, UsageRecord

from conftest import MemorySink


@pytest.fixture
def session_factory():
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield sessionmaker(autocommit=False, autoflush=False, bind=engine)
    Base.metadata.drop_all(bind=engine)


def test_record_outside_loop_writes_inline():
    sink = MemorySink()
    UsageLogger(sink).record("u1", "gemini", 12, 100)
    assert len(sink.records) == 1
    rec = sink.records[0]
    assert (rec.user_id, rec.provider, rec.prompt_length, rec.tokens_used) == ("u1", "gemini", 12, 100)
    assert rec.timestamp.tzinfo is not None


def test_sink_failure_is_swallowed(caplog):
    logger = UsageLogger(MemorySink(fail=True))
    logger.record(None, "claude", 3, 4)
    assert "Usage sink write failed" in caplog.text


def test_logger_without_sink_is_a_noop():
    UsageLogger().record(None, "gemini", 1, 1)


@pytest.mark.asyncio
async def test_concurrent_records_all_land():
    sink = MemorySink()
    logger = UsageLogger(sink)

    async def one(i):
        logger.record(f"user{i}", "gemini", i, i * 2)
        await asyncio.sleep(0)

    await asyncio.gather(*(one(i) for i in range(50)))
    await logger.drain()
    assert sorted(r.prompt_length for r in sink.records) == list(range(50))


def test_sql_sink_writes_rows(session_factory):
    sink = SqlUsageSink(session_factory)
    ts = datetime(2025, 3, 1, 9, 30, tzinfo=timezone.utc)
    sink.write(UsageRecord(user_id="u9", provider="claude", prompt_length=20, tokens_used=55, timestamp=ts))
    db = session_factory()
    rows = db.query(GenerationLog).all()
    db.close()
    assert len(rows) == 1
    assert rows[0].user_id == "u9"
    assert rows[0].tokens_used == 55
    assert rows[0].created_at == datetime(2025, 3, 1, 9, 30)


def test_purge_usage_older_than(session_factory):
    now = datetime(2025, 6, 1)
    db = session_factory()
    db.add_all([
        GenerationLog(provider="gemini", prompt_length=1, tokens_used=1, created_at=now - timedelta(days=100)),
        GenerationLog(provider="gemini", prompt_length=1, tokens_used=1, created_at=now - timedelta(days=5)),
    ])
    db.commit()
    assert purge_usage_older_than(db, 0, now=now) == 0
    assert purge_usage_older_than(db, 30, now=now) == 1
    assert db.query(GenerationLog).count() == 1
    db.close()


@pytest.mark.asyncio
async def test_concurrent_records_into_sqlite_file(tmp_path):
    engine = make_engine(f"sqlite:///{tmp_path / 'usage.db'}")
    Base.metadata.create_all(bind=engine)
    factory = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    logger = UsageLogger(SqlUsageSink(factory))
    ts = datetime(2025, 5, 5, 8, 0, tzinfo=timezone.utc)

    async def one(i):
        logger.record(f"user{i}", "claude" if i % 2 else "gemini", i, i * 3, ts)
        await asyncio.sleep(0)

    await asyncio.gather(*(one(i) for i in range(50)))
    await logger.drain()

    db = factory()
    rows = db.query(GenerationLog).order_by(GenerationLog.prompt_length).all()
    db.close()
    engine.dispose()
    assert [r.prompt_length for r in rows] == list(range(50))
    for r in rows:
        assert r.user_id == f"user{r.prompt_length}"
        assert r.tokens_used == r.prompt_length * 3
        assert r.provider == ("claude" if r.prompt_length % 2 else "gemini")
        assert r.created_at == datetime(2025, 5, 5, 8, 0)
