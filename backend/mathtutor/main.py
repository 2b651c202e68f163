import logging

from fastapi import Depends, FastAPI
from sqlalchemy.orm import Session

from .db import Base, engine, get_db, ensure_schema
from .question_store import count_questions
from .settings import settings
from .routers import health
from .routers import exam_questions

logging.basicConfig(
	level=getattr(logging, settings.log_level.upper(), logging.INFO),
	format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(title="GCSE Maths Tutor API")
app.include_router(health.router)
app.include_router(exam_questions.router)


@app.get("/info")
def root(db: Session = Depends(get_db)):
	return {"status": "ok", "exam_questions": count_questions(db)}


@app.on_event("startup")
async def startup_event():
	# Initialize DB schema
	Base.metadata.create_all(bind=engine)
	# Apply lightweight dev migrations
	try:
		ensure_schema()
	except Exception as e:
		logger.warning("Schema migration skipped: %s", e)
