from sqlalchemy.exc import OperationalError

from mathtutor.ocr import OcrUnavailableError
from mathtutor.routers import exam_questions


def _import(client, questions):
	r = client.post("/exam-questions/import", json={"questions": questions})
	assert r.status_code == 201, r.text
	return r.json()


def test_health_and_info(client, past_exam_questions):
	assert client.get("/health").json() == {"status": "ok"}
	assert client.get("/info").json() == {"status": "ok", "exam_questions": 0}
	_import(client, past_exam_questions)
	assert client.get("/info").json()["exam_questions"] == len(past_exam_questions)


def test_detect_returns_match_and_summary(client, past_exam_questions):
	assert _import(client, past_exam_questions) == {"imported": len(past_exam_questions)}

	r = client.post("/exam-questions/detect", json={"text": "Magana decides to put £500 into an account that pays compound interest"})
	assert r.status_code == 200
	body = r.json()
	assert body["match"]["id"] == "edexcel-2022-2h-q14"
	assert body["match"]["examBoard"] == "Edexcel"
	assert body["match"]["marks"] == 3
	assert "- **Topic:** Compound Interest" in body["summary"]


def test_detect_without_match_returns_null(client):
	_import(client, [{"id": "c1", "question": "Find the area of a circle with radius 5cm"}])
	r = client.post("/exam-questions/detect", json={"text": "What is 7 times 8?"})
	assert r.status_code == 200
	assert r.json()["match"] is None
	assert r.json()["summary"] == ""


def test_detect_on_empty_store_returns_null(client):
	r = client.post("/exam-questions/detect", json={"text": "Solve 2x + 3 = 7"})
	assert r.status_code == 200
	assert r.json()["match"] is None


def test_detect_requires_text(client):
	assert client.post("/exam-questions/detect", json={"text": "   "}).status_code == 400


def test_detect_image_runs_ocr_text_through_matcher(client, past_exam_questions, monkeypatch):
	_import(client, past_exam_questions)
	monkeypatch.setattr(exam_questions, "extract_text_from_image", lambda content: "Solve the equation 3x + 7 = 22")
	r = client.post("/exam-questions/detect/image", files={"file": ("page.png", b"fake", "image/png")})
	assert r.status_code == 200
	body = r.json()
	assert body["text"] == "Solve the equation 3x + 7 = 22"
	assert body["match"]["id"] == "aqa-2023-1h-q1"


def test_detect_image_errors(client, monkeypatch):
	def unavailable(content):
		raise OcrUnavailableError("tesseract missing")

	def unreadable(content):
		raise ValueError("not an image")

	monkeypatch.setattr(exam_questions, "extract_text_from_image", unavailable)
	assert client.post("/exam-questions/detect/image", files={"file": ("a.png", b"x", "image/png")}).status_code == 500

	monkeypatch.setattr(exam_questions, "extract_text_from_image", unreadable)
	assert client.post("/exam-questions/detect/image", files={"file": ("a.png", b"x", "image/png")}).status_code == 400

	monkeypatch.setattr(exam_questions, "extract_text_from_image", lambda content: "")
	assert client.post("/exam-questions/detect/image", files={"file": ("a.png", b"x", "image/png")}).status_code == 400


def test_import_validation(client, past_exam_questions):
	assert client.post("/exam-questions/import", json={"questions": []}).status_code == 400
	assert client.post("/exam-questions/import", json={"questions": [{"question": "No id here"}]}).status_code == 400
	assert client.post("/exam-questions/import", json={"questions": [{"id": "x", "question": " "}]}).status_code == 400
	assert client.post("/exam-questions/import", json={"questions": [{"id": "x", "question": "Expand 2(x + 1)", "level": "AS"}]}).status_code == 422

	_import(client, past_exam_questions[:1])
	r = client.post("/exam-questions/import", json={"questions": past_exam_questions[:1]})
	assert r.status_code == 409


def test_random_questions_count_is_clamped(client, past_exam_questions):
	_import(client, past_exam_questions)
	assert len(client.get("/exam-questions/random").json()["questions"]) == 1
	assert len(client.get("/exam-questions/random", params={"count": 0}).json()["questions"]) == 1
	assert len(client.get("/exam-questions/random", params={"count": 3}).json()["questions"]) == 3
	assert len(client.get("/exam-questions/random", params={"count": 100}).json()["questions"]) == len(past_exam_questions)


def test_detect_reports_unavailable_store(client, monkeypatch):
	def broken(db):
		raise OperationalError("SELECT past_exam_questions", {}, Exception("database is locked"))

	monkeypatch.setattr(exam_questions, "fetch_all_candidates", broken)
	r = client.post("/exam-questions/detect", json={"text": "Solve 2x + 3 = 7"})
	assert r.status_code == 503
	assert r.json()["detail"] == "exam question store unavailable"
