from __future__ import annotations
from datetime import datetime, timedelta
from typing import Optional
from sqlalchemy import delete
from sqlalchemy.orm import Session

from .models import GenerationLog


def purge_usage_older_than(db: Session, days: int, *, now: Optional[datetime] = None) -> int:
	# days <= 0 disables retention
	if days <= 0:
		return 0
	threshold = (now or datetime.utcnow()) - timedelta(days=days)
	res = db.execute(delete(GenerationLog).where(GenerationLog.created_at < threshold))
	db.commit()
	return res.rowcount or 0
