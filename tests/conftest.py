import os
import tempfile

# Point the app at a throwaway sqlite file before any mathtutor module loads settings
_tmpdir = tempfile.mkdtemp(prefix="mathtutor-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(_tmpdir, 'test.db')}"

import pytest
from fastapi.testclient import TestClient

from mathtutor.db import Base, SessionLocal, engine
from mathtutor.main import app


PAST_EXAM_QUESTIONS = [
	{
		"id": "aqa-2023-1h-q1",
		"question": "Solve the equation 3x + 7 = 22",
		"examBoard": "AQA",
		"year": 2023,
		"paper": "Paper 1H",
		"questionNumber": "1",
		"category": "Algebra",
		"marks": 2,
		"difficulty": "Higher",
		"topic": "Linear Equations",
	},
	{
		"id": "aqa-2023-1h-q5",
		"question": "Find the area of a triangle with base 8cm and height 6cm",
		"examBoard": "AQA",
		"year": 2023,
		"paper": "Paper 1H",
		"questionNumber": "5",
		"category": "Geometry",
		"marks": 2,
		"difficulty": "Higher",
		"topic": "Area and Perimeter",
	},
	{
		"id": "edexcel-2022-1f-q3",
		"question": "Calculate 15% of £120",
		"examBoard": "Edexcel",
		"year": 2022,
		"paper": "Paper 1F",
		"questionNumber": "3",
		"category": "Number",
		"marks": 2,
		"difficulty": "Foundation",
		"topic": "Percentages",
	},
	{
		"id": "edexcel-2022-2h-q14",
		"question": "Magana decides to put £500 into an account that pays compound interest at a rate of 3% per year. Work out how much is in the account after 4 years.",
		"examBoard": "Edexcel",
		"year": 2022,
		"paper": "Paper 2H",
		"questionNumber": "14",
		"category": "Number",
		"marks": 3,
		"difficulty": "Higher",
		"topic": "Compound Interest",
	},
]


@pytest.fixture
def past_exam_questions():
	return [dict(q) for q in PAST_EXAM_QUESTIONS]


@pytest.fixture
def db():
	Base.metadata.create_all(bind=engine)
	session = SessionLocal()
	try:
		yield session
	finally:
		session.close()
		Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client(db):
	with TestClient(app) as c:
		yield c
