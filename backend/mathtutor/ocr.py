from __future__ import annotations
from io import BytesIO

from .settings import settings

try:
	import pytesseract  # type: ignore
	from PIL import Image  # type: ignore
except Exception:
	# Defer import errors until an image is actually submitted
	pytesseract = None  # type: ignore
	Image = None  # type: ignore


class OcrUnavailableError(RuntimeError):
	pass


def extract_text_from_image(content: bytes) -> str:
	if pytesseract is None or Image is None:
		raise OcrUnavailableError(
			"OCR dependencies not installed. Install system package 'tesseract-ocr' and Python packages 'pytesseract' and 'Pillow'"
		)
	if settings.tesseract_cmd:
		pytesseract.pytesseract.tesseract_cmd = settings.tesseract_cmd
	try:
		img = Image.open(BytesIO(content))
	except OSError as e:
		raise ValueError(f"Failed to read image: {e}") from e
	try:
		text = pytesseract.image_to_string(img)
	except pytesseract.TesseractNotFoundError as e:
		raise OcrUnavailableError(str(e)) from e
	return text.strip()[: settings.ocr_max_chars]
