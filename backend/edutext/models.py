from __future__ import annotations
from datetime import datetime
from sqlalchemy import Column, String, DateTime, Integer
from .db import Base


class GenerationLog(Base):
	__tablename__ = "generation_logs"
	id = Column(Integer, primary_key=True, autoincrement=True)
	# Opaque id from the session layer; anonymous requests store NULL
	user_id = Column(String(128), nullable=True, index=True)
	provider = Column(String(32), nullable=False)
	prompt_length = Column(Integer, nullable=False)
	tokens_used = Column(Integer, nullable=False)
	created_at = Column(DateTime, default=datetime.utcnow, nullable=False, index=True)
