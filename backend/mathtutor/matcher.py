from __future__ import annotations

import logging
import re
from collections.abc import Mapping, Sequence
from typing import Any, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from rapidfuzz.distance import Levenshtein


logger = logging.getLogger(__name__)

# Lowest score still reported as a match.
SIMILARITY_THRESHOLD = 0.05
# A candidate scoring above this stops the corpus scan.
EARLY_EXIT_SCORE = 0.9

_LEVELS = {"gcse": "GCSE", "a-level": "A-Level"}

# Only ASCII word characters survive; any unicode whitespace is collapsed.
_NON_WORD = re.compile(r"[^A-Za-z0-9_\s]")
_WHITESPACE = re.compile(r"\s+")


class ExamQuestionMetadata(BaseModel):
    """A past paper question and the exam it was set in.

    Documents are stored and exchanged with camelCase keys (``examBoard``,
    ``questionNumber``); both those and the snake_case field names are
    accepted on input. Everything except ``question`` has a default so that
    sparse documents from the store can still be matched.
    """

    model_config = ConfigDict(populate_by_name=True)

    id: str = ""
    question: str
    exam_board: str = Field(default="", alias="examBoard")
    year: Optional[int] = None
    paper: str = ""
    level: Literal["GCSE", "A-Level"] = "GCSE"
    question_number: str = Field(default="", alias="questionNumber")
    topic: str = ""
    difficulty: Optional[Literal["Foundation", "Higher"]] = None
    marks: Optional[int] = Field(default=None, ge=0)
    category: str = "General"

    @field_validator("id", "paper", "question_number", mode="before")
    @classmethod
    def _numbers_to_str(cls, value: Any) -> Any:
        if value is None:
            return ""
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)
        return value

    @field_validator("exam_board", "topic", mode="before")
    @classmethod
    def _none_to_empty(cls, value: Any) -> Any:
        return "" if value is None else value

    @field_validator("category", mode="before")
    @classmethod
    def _default_category(cls, value: Any) -> Any:
        return value or "General"

    @field_validator("level", mode="before")
    @classmethod
    def _default_level(cls, value: Any) -> Any:
        if isinstance(value, str):
            # "gcse", "A Level", "a-level"
            value = _LEVELS.get(value.strip().lower().replace(" ", "-"), value)
        return value or "GCSE"

    @field_validator("difficulty", mode="before")
    @classmethod
    def _blank_difficulty(cls, value: Any) -> Any:
        if isinstance(value, str):
            value = value.strip().capitalize()
        return value or None


CandidateRecord = Union[ExamQuestionMetadata, Mapping[str, Any]]


def normalize(text: str) -> str:
    """Lower-case, strip punctuation and symbols, collapse whitespace."""
    text = _NON_WORD.sub("", text.lower())
    return _WHITESPACE.sub(" ", text).strip()


def _edit_distance(a: str, b: str, max_distance: Optional[int] = None) -> int:
    # above max_distance the result is only guaranteed to be max_distance + 1
    return Levenshtein.distance(a, b, score_cutoff=max_distance)


def _words_match(word1: str, word2: str) -> bool:
    if word1 == word2 or word2 in word1 or word1 in word2:
        return True
    return _edit_distance(word1, word2, max_distance=2) <= 2


def similarity(text1: str, text2: str) -> float:
    """Score two normalized texts between 0.0 and 1.0.

    Containment of one text in the other scores the covered fraction, which
    handles a partial OCR capture of a longer question. Otherwise the result
    is the better of a word overlap score (words of four letters or more,
    tolerating two edits) and a same-position character overlap score.

    The word overlap walks ``text1`` against ``text2``, so swapping the
    arguments is not guaranteed to give the same score.
    """
    if text1 == text2:
        return 1.0
    if not text1 or not text2:
        return 0.0

    if len(text1) > len(text2):
        longer, shorter = text1, text2
    else:
        longer, shorter = text2, text1

    if shorter in longer:
        return len(shorter) / len(longer)

    words1 = text1.split()
    words2 = text2.split()

    word_matches = 0
    for word1 in words1:
        if len(word1) <= 3:
            continue
        for word2 in words2:
            if len(word2) > 3 and _words_match(word1, word2):
                word_matches += 1
                break
    # short words still count towards the total
    word_similarity = word_matches / max(len(words1), len(words2))

    char_matches = sum(1 for c1, c2 in zip(text1, text2) if c1 == c2)
    char_similarity = char_matches / max(len(text1), len(text2))

    return max(word_similarity, char_similarity)


def _to_metadata(record: Any) -> Optional[ExamQuestionMetadata]:
    """Return the record as metadata, or None when it cannot take part in a scan."""
    if isinstance(record, ExamQuestionMetadata):
        text = record.question
        record_id = record.id
    elif isinstance(record, Mapping):
        text = record.get("question")
        record_id = record.get("id")
    else:
        logger.warning("Skipping malformed exam question record of type %s", type(record).__name__)
        return None

    if not isinstance(text, str):
        if text is not None:
            logger.warning("Skipping exam question %r: question text is %s, not str", record_id, type(text).__name__)
        else:
            logger.debug("Skipping exam question without text: %r", record_id)
        return None
    # whitespace-only text is skipped too: it normalizes to "" and would
    # score 1.0 against an input made only of punctuation
    if not text.strip():
        logger.debug("Skipping exam question without text: %r", record_id)
        return None

    if isinstance(record, ExamQuestionMetadata):
        return record
    try:
        return ExamQuestionMetadata.model_validate(record)
    except ValidationError as e:
        invalid = {str(err["loc"][0]) for err in e.errors() if err["loc"]}
    logger.warning("Defaulting invalid fields %s of exam question %r", sorted(invalid), record_id)

    # drop each invalid field under both its name and its alias
    dropped = set(invalid)
    for name, field in ExamQuestionMetadata.model_fields.items():
        if name in invalid or field.alias in invalid:
            dropped.update({name, field.alias})
    cleaned = {key: value for key, value in record.items() if key not in dropped}
    try:
        return ExamQuestionMetadata.model_validate(cleaned)
    except ValidationError as e:
        logger.warning("Skipping malformed exam question %r: %s", record_id, e)
        return None


def detect_exam_question(
    question_text: str,
    corpus: Sequence[CandidateRecord],
) -> Optional[ExamQuestionMetadata]:
    """Find the past paper question that best matches ``question_text``.

    Candidates are scored in corpus order. A later candidate only replaces
    the current best when it scores strictly higher, and the scan stops as
    soon as one scores above ``EARLY_EXIT_SCORE``. The best candidate is
    returned when its score reaches ``SIMILARITY_THRESHOLD``; otherwise None.
    Records without usable question text are skipped, never scored.
    """
    logger.info("Detecting exam question: %.100s", question_text)

    if not corpus:
        logger.info("No exam questions to compare against")
        return None

    normalized_question = normalize(question_text)

    best_match: Optional[ExamQuestionMetadata] = None
    best_similarity = 0.0

    for record in corpus:
        candidate = _to_metadata(record)
        if candidate is None:
            continue

        score = similarity(normalized_question, normalize(candidate.question))
        logger.debug("Compared with %r: %.100s (similarity %.4f)", candidate.id, candidate.question, score)

        if score > best_similarity:
            best_similarity = score
            best_match = candidate

        if score > EARLY_EXIT_SCORE:
            break

    logger.info("Best similarity score %.3f (threshold %s)", best_similarity, SIMILARITY_THRESHOLD)

    if best_match is not None and best_similarity >= SIMILARITY_THRESHOLD:
        logger.info(
            "Exam question detected: %s %s %s",
            best_match.exam_board, best_match.year, best_match.paper,
        )
        return best_match.model_copy()

    logger.info("No matching exam question found")
    return None


def format_exam_metadata(metadata: Optional[ExamQuestionMetadata]) -> str:
    if metadata is None:
        return ""
    fields = [
        ("Level", metadata.level),
        ("Exam Board", metadata.exam_board),
        ("Year", metadata.year),
        ("Paper", metadata.paper),
        ("Question", metadata.question_number),
        ("Topic", metadata.topic),
        ("Difficulty", metadata.difficulty),
        ("Marks", metadata.marks),
    ]
    lines = ["**Past Paper Question Detected!**"]
    # fields missing from the stored document are left out
    lines.extend(f"- **{label}:** {value}" for label, value in fields if value not in (None, ""))
    return "\n".join(lines)
