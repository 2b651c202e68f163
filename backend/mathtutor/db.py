from __future__ import annotations
from sqlalchemy import create_engine, inspect
from sqlalchemy.orm import sessionmaker, declarative_base
from .settings import settings


DATABASE_URL = settings.database_url or "sqlite:///./app.db"

_connect_args = {"check_same_thread": False} if DATABASE_URL.startswith("sqlite") else {}

engine = create_engine(DATABASE_URL, connect_args=_connect_args, future=True)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine, future=True)
Base = declarative_base()


def get_db():
	db = SessionLocal()
	try:
		yield db
	finally:
		db.close()


# Best-effort lightweight migrations for development (SQLite-friendly)
def ensure_schema() -> None:
	try:
		inspector = inspect(engine)
		tables = set(inspector.get_table_names())
	except Exception:
		return
	if "past_exam_questions" in tables:
		cols = {c["name"] for c in inspector.get_columns("past_exam_questions")}
		with engine.begin() as conn:
			if "category" not in cols:
				conn.exec_driver_sql("ALTER TABLE past_exam_questions ADD COLUMN category VARCHAR(128) DEFAULT 'General' NOT NULL")
			if "level" not in cols:
				conn.exec_driver_sql("ALTER TABLE past_exam_questions ADD COLUMN level VARCHAR(16) DEFAULT 'GCSE' NOT NULL")
