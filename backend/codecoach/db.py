from __future__ import annotations
from typing import Any, Optional

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, declarative_base
from .settings import settings


DEFAULT_DATABASE_URL = "sqlite:///./app.db"


def make_engine(url: str, **kwargs: Any) -> Engine:
	"""Engine for ``url``; SQLite connections may be shared across request threads."""
	connect_args = {"check_same_thread": False} if url.startswith("sqlite") else {}
	return create_engine(url, connect_args=connect_args, future=True, **kwargs)


engine = make_engine(settings.database_url or DEFAULT_DATABASE_URL)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine, future=True)
Base = declarative_base()


def init_db(bind: Optional[Engine] = None) -> None:
	# Importing models registers submission_results on Base.metadata
	from . import models  # noqa: F401

	Base.metadata.create_all(bind=bind or engine)


def get_db():
	db = SessionLocal()
	try:
		yield db
	finally:
		db.close()
