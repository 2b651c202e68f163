from __future__ import annotations
import logging
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, File, HTTPException, Query, UploadFile
from pydantic import BaseModel, Field
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..db import get_db
from ..matcher import ExamQuestionMetadata, detect_exam_question, format_exam_metadata
from ..ocr import OcrUnavailableError, extract_text_from_image
from ..question_store import add_questions, fetch_all_candidates, get_random_questions
from ..settings import settings


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/exam-questions", tags=["exam-questions"])


class DetectRequest(BaseModel):
	text: str


class DetectResponse(BaseModel):
	match: Optional[Dict[str, Any]] = None
	summary: str = ""
	text: Optional[str] = None


class ImportRequest(BaseModel):
	questions: List[ExamQuestionMetadata] = Field(default_factory=list)


def _detect(text: str, db: Session) -> DetectResponse:
	try:
		corpus = fetch_all_candidates(db)
	except SQLAlchemyError as e:
		logger.error("Failed to load exam questions: %s", e)
		raise HTTPException(status_code=503, detail="exam question store unavailable")
	match = detect_exam_question(text, corpus)
	return DetectResponse(
		match=match.model_dump(by_alias=True) if match else None,
		summary=format_exam_metadata(match),
	)


@router.post("/detect", response_model=DetectResponse)
def detect(req: DetectRequest, db: Session = Depends(get_db)):
	text = (req.text or "").strip()
	if not text:
		raise HTTPException(status_code=400, detail="text is required")
	return _detect(text, db)


@router.post("/detect/image", response_model=DetectResponse)
def detect_image(file: UploadFile = File(...), db: Session = Depends(get_db)):
	# blocking: OCR and a full corpus scan
	content = file.file.read()
	try:
		text = extract_text_from_image(content)
	except OcrUnavailableError as e:
		raise HTTPException(status_code=500, detail=str(e))
	except ValueError as e:
		raise HTTPException(status_code=400, detail=f"Failed to OCR image: {e}")
	if not text:
		raise HTTPException(status_code=400, detail="no text found in image")
	result = _detect(text, db)
	result.text = text
	return result


@router.get("/random")
def random_questions(count: int = Query(default=1), db: Session = Depends(get_db)):
	count = max(1, min(count, settings.random_questions_max))
	return {"questions": get_random_questions(db, count)}


@router.post("/import", status_code=201)
def import_questions(req: ImportRequest, db: Session = Depends(get_db)):
	if not req.questions:
		raise HTTPException(status_code=400, detail="questions are required")
	if any(not q.id for q in req.questions):
		raise HTTPException(status_code=400, detail="every question needs an id")
	blank = [q.id for q in req.questions if not q.question.strip()]
	if blank:
		raise HTTPException(status_code=400, detail=f"question text is required: {', '.join(blank)}")
	try:
		imported = add_questions(db, req.questions)
	except ValueError as e:
		raise HTTPException(status_code=409, detail=str(e))
	return {"imported": imported}
