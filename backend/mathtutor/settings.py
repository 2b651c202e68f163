from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field

class Settings(BaseSettings):
	# Database holding the past exam question corpus
	database_url: str | None = Field(default=None, validation_alias="DATABASE_URL")

	# OCR configuration (tesseract binary is looked up on PATH when unset)
	tesseract_cmd: str | None = Field(default=None, validation_alias="TESSERACT_CMD")
	# Clamp OCR output before detection to avoid scoring huge text blobs
	ocr_max_chars: int = Field(default=8000, validation_alias="OCR_MAX_CHARS")

	# Upper bound for /exam-questions/random
	random_questions_max: int = Field(default=20, validation_alias="RANDOM_QUESTIONS_MAX")

	log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")

	# pydantic-settings v2 style config
	model_config = SettingsConfigDict(env_file=".env", extra="ignore")

settings = Settings()
