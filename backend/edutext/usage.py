from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, Optional, Protocol, Set

from sqlalchemy.orm import Session

from .models import GenerationLog

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class UsageRecord:
    user_id: Optional[str]
    provider: str
    prompt_length: int
    tokens_used: int
    timestamp: datetime


class UsageSink(Protocol):
    def write(self, record: UsageRecord) -> None: ...


class SqlUsageSink:
    """Appends one ``generation_logs`` row per record, each in its own session."""

    def __init__(self, session_factory: Callable[[], Session]) -> None:
        self._session_factory = session_factory

    def write(self, record: UsageRecord) -> None:
        created_at = record.timestamp
        if created_at.tzinfo is not None:
            created_at = created_at.astimezone(timezone.utc).replace(tzinfo=None)
        db = self._session_factory()
        try:
            db.add(
                GenerationLog(
                    user_id=record.user_id,
                    provider=record.provider,
                    prompt_length=record.prompt_length,
                    tokens_used=record.tokens_used,
                    created_at=created_at,
                )
            )
            db.commit()
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()


class UsageLogger:
    """Fire-and-forget usage accounting.

    ``record`` never raises. Inside a running event loop the sink write is
    pushed to the default executor; failures are reported through the
    module logger only.
    """

    def __init__(self, sink: Optional[UsageSink] = None) -> None:
        self.sink = sink
        self._pending: Set["asyncio.Future[None]"] = set()

    def record(
        self,
        user_id: Optional[str],
        provider: str,
        prompt_length: int,
        tokens_used: int,
        timestamp: Optional[datetime] = None,
    ) -> None:
        try:
            entry = UsageRecord(
                user_id=user_id,
                provider=provider,
                prompt_length=prompt_length,
                tokens_used=tokens_used,
                timestamp=timestamp or datetime.now(timezone.utc),
            )
            logger.info(
                "Generation log: user=%s provider=%s prompt_length=%d tokens=%d at=%s",
                entry.user_id,
                entry.provider,
                entry.prompt_length,
                entry.tokens_used,
                entry.timestamp.isoformat(),
            )
            if self.sink is None:
                return
            try:
                loop = asyncio.get_running_loop()
            except RuntimeError:
                self._write(entry)
                return
            future = loop.run_in_executor(None, self._write, entry)
            self._pending.add(future)
            future.add_done_callback(self._pending.discard)
        except Exception:
            logger.exception("Usage logging failed")

    def _write(self, entry: UsageRecord) -> None:
        try:
            self.sink.write(entry)
        except Exception:
            logger.exception("Usage sink write failed for provider=%s", entry.provider)

    async def drain(self) -> None:
        if self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)
