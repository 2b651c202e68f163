from __future__ import annotations
from datetime import datetime
from sqlalchemy import Column, String, DateTime, Integer, Text
from .db import Base


class PastExamQuestion(Base):
	__tablename__ = "past_exam_questions"
	# Document id from the import payload, e.g. "aqa-2023-1h-q1"
	id = Column(String(128), primary_key=True, index=True)
	question = Column(Text, nullable=False)
	exam_board = Column(String(64), nullable=False, default="")
	year = Column(Integer, nullable=True)
	paper = Column(String(64), nullable=False, default="")
	level = Column(String(16), nullable=False, default="GCSE")
	question_number = Column(String(16), nullable=False, default="")
	topic = Column(String(128), nullable=False, default="")
	difficulty = Column(String(16), nullable=True)
	marks = Column(Integer, nullable=True)
	category = Column(String(128), nullable=False, default="General")
	created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
	updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

	def to_document(self) -> dict:
		# Same camelCase shape the question documents are imported with
		return {
			"id": self.id,
			"question": self.question,
			"examBoard": self.exam_board,
			"year": self.year,
			"paper": self.paper,
			"level": self.level,
			"questionNumber": self.question_number,
			"topic": self.topic,
			"difficulty": self.difficulty,
			"marks": self.marks,
			"category": self.category,
		}
