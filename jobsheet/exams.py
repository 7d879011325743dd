"""Practice exam catalog: sheet rows to MockExam objects and catalog views."""
from typing import Dict, List, Mapping, Sequence
import logging

from .errors import DataFormatError
from .mapper import missing_columns
from .models import MockExam, DEFAULT_CATEGORY

logger = logging.getLogger(__name__)

EXAM_REQUIRED_COLUMNS = ("exam id", "exam name", "exam type")

_TRUE_VALUES = {"true", "yes", "1"}


def _to_int(value: str) -> int:
    try:
        return int(float(value))
    except (TypeError, ValueError):
        return 0


def _to_float(value: str) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0.0


def map_exam_rows(rows: Sequence[Mapping[str, str]]) -> List[MockExam]:
    """Map parsed exam sheet rows to MockExam objects.

    Rows without an exam id are skipped. Numeric cells that do not parse
    become zero.

    Raises:
        DataFormatError: If a required column is missing
    """
    if not rows:
        return []

    missing = missing_columns(rows[0], EXAM_REQUIRED_COLUMNS)
    if missing:
        raise DataFormatError(missing)

    exams = []
    for row in rows:
        exam_id = row.get("exam id")
        if not exam_id:
            logger.warning(f"Skipping exam row without id: {row.get('exam name', '')!r}")
            continue
        exams.append(MockExam(
            exam_id=exam_id,
            name=row.get("exam name") or exam_id,
            exam_type=row.get("exam type") or DEFAULT_CATEGORY,
            total_questions=_to_int(row.get("total questions", "")),
            duration_minutes=_to_int(row.get("duration minutes", "")),
            negative_marking=_to_float(row.get("negative marking", "")),
            published=row.get("published", "").strip().lower() in _TRUE_VALUES,
        ))

    logger.info(f"Mapped {len(exams)} exams")
    return exams


def published_exams(exams: Sequence[MockExam]) -> List[MockExam]:
    """Exams flagged as published, in sheet order."""
    return [exam for exam in exams if exam.published]


def exams_by_type(exams: Sequence[MockExam]) -> Dict[str, List[MockExam]]:
    """Group published exams by exam type, types in sorted order."""
    grouped: Dict[str, List[MockExam]] = {}
    for exam in published_exams(exams):
        grouped.setdefault(exam.exam_type, []).append(exam)
    return {exam_type: grouped[exam_type] for exam_type in sorted(grouped)}


def exam_types(exams: Sequence[MockExam]) -> List[str]:
    """Sorted exam types that have at least one published exam."""
    return list(exams_by_type(exams))
