"""Tests for the practice exam catalog."""
import pytest
from jobsheet.csv_parser import parse_csv
from jobsheet.errors import DataFormatError
from jobsheet.exams import map_exam_rows, published_exams, exams_by_type, exam_types
from jobsheet.models import MockExam

EXAMS_CSV = (
    "Exam ID,Exam Name,Exam Type,Total Questions,Duration Minutes,Negative Marking,Published\n"
    "ssc-1,SSC CGL Mock 1,SSC,100,60,0.5,TRUE\n"
    "rrb-1,RRB NTPC Mock 1,RRB,100,90,0.33,yes\n"
    "ssc-2,SSC CGL Mock 2,SSC,many,,,no\n"
    ",Untitled,SSC,10,10,0,1\n"
    "bank-1,IBPS PO Mock,Banking,,,,\n"
)


@pytest.fixture
def exams():
    return map_exam_rows(parse_csv(EXAMS_CSV))


def test_map_exam_rows(exams):
    """Test that exam rows map to MockExam objects, skipping rows without an id."""
    assert [exam.exam_id for exam in exams] == ["ssc-1", "rrb-1", "ssc-2", "bank-1"]
    assert exams[0] == MockExam(
        exam_id="ssc-1",
        name="SSC CGL Mock 1",
        exam_type="SSC",
        total_questions=100,
        duration_minutes=60,
        negative_marking=0.5,
        published=True,
    )


def test_bad_numbers_become_zero(exams):
    lenient = exams[2]

    assert lenient.total_questions == 0
    assert lenient.duration_minutes == 0
    assert lenient.negative_marking == 0.0
    assert not lenient.published


def test_missing_exam_columns():
    with pytest.raises(DataFormatError) as exc_info:
        map_exam_rows(parse_csv("exam id,exam name\nx,y\n"))

    assert exc_info.value.missing_columns == ["exam type"]


def test_empty_exam_sheet():
    assert map_exam_rows([]) == []


def test_published_exams(exams):
    assert [exam.exam_id for exam in published_exams(exams)] == ["ssc-1", "rrb-1"]


def test_exams_by_type(exams):
    """Test grouping of published exams by sorted type."""
    grouped = exams_by_type(exams)

    assert list(grouped) == ["RRB", "SSC"]
    assert [exam.exam_id for exam in grouped["SSC"]] == ["ssc-1"]
    assert exam_types(exams) == ["RRB", "SSC"]


def test_exam_to_dict(exams):
    assert exams[1].to_dict() == {
        "exam_id": "rrb-1",
        "name": "RRB NTPC Mock 1",
        "exam_type": "RRB",
        "total_questions": 100,
        "duration_minutes": 90,
        "negative_marking": 0.33,
        "published": True,
    }
