from __future__ import annotations
from typing import Optional
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base
from .settings import settings


DATABASE_URL = settings.database_url or "sqlite:///./edutext.db"

Base = declarative_base()


def make_engine(url: Optional[str] = None) -> Engine:
	url = url or DATABASE_URL
	connect_args = {"check_same_thread": False} if url.startswith("sqlite") else {}
	return create_engine(url, connect_args=connect_args, future=True)


engine = make_engine()
