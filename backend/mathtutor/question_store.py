from __future__ import annotations
import logging
import random
from typing import Any, Dict, List, Sequence

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from .matcher import ExamQuestionMetadata
from .models import PastExamQuestion


logger = logging.getLogger(__name__)


def fetch_all_candidates(db: Session) -> List[Dict[str, Any]]:
	# Full table read; detection always scores the whole corpus
	rows = db.execute(
		select(PastExamQuestion).order_by(PastExamQuestion.created_at, PastExamQuestion.id)
	).scalars().all()
	logger.info("Found %d questions in database for comparison", len(rows))
	return [row.to_document() for row in rows]


def count_questions(db: Session) -> int:
	return db.scalar(select(func.count()).select_from(PastExamQuestion)) or 0


def add_questions(db: Session, records: Sequence[ExamQuestionMetadata]) -> int:
	"""Insert ``records`` in one transaction.

	Raises ValueError when an id is repeated in the payload or already
	stored; nothing is written in that case.
	"""
	seen: set[str] = set()
	for record in records:
		if not record.id:
			raise ValueError("every imported question needs an id")
		if record.id in seen:
			raise ValueError(f"duplicate question id in payload: {record.id}")
		seen.add(record.id)
	existing = db.execute(
		select(PastExamQuestion.id).where(PastExamQuestion.id.in_(seen))
	).scalars().all()
	if existing:
		raise ValueError(f"question id already exists: {', '.join(sorted(existing))}")

	for record in records:
		db.add(PastExamQuestion(
			id=record.id,
			question=record.question,
			exam_board=record.exam_board,
			year=record.year,
			paper=record.paper,
			level=record.level,
			question_number=record.question_number,
			topic=record.topic,
			difficulty=record.difficulty,
			marks=record.marks,
			category=record.category,
		))
	try:
		db.commit()
	except IntegrityError as e:
		db.rollback()
		raise ValueError("question id already exists") from e
	logger.info("Imported %d exam questions", len(records))
	return len(records)


def get_random_questions(db: Session, count: int = 1) -> List[Dict[str, Any]]:
	if count < 1:
		return []
	questions = fetch_all_candidates(db)
	if not questions:
		logger.info("No questions found in database")
		return []
	selected = random.sample(questions, min(count, len(questions)))
	logger.info("Selected %d random questions", len(selected))
	return selected
