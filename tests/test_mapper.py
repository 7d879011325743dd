"""Tests for mapping sheet rows to postings."""
import pytest
from datetime import date
from jobsheet.csv_parser import parse_csv
from jobsheet.errors import DataFormatError, ErrorKind
from jobsheet.mapper import (
    RecordMapper,
    PinnedPosting,
    DEFAULT_PINNED,
    REQUIRED_COLUMNS,
    map_rows,
    missing_columns,
    pinned_from_config,
)
from jobsheet.models import JobPosting

TODAY = date(2024, 7, 1)

SHEET = (
    "ID,Job Title,Description,Category,Start Date,Last Date,Salary,Location,Job Type,SyllabusLink,Link\n"
    "ssc-1,SSC CGL 2024,Combined graduate level,SSC,10/06/2024,24/07/2024,Rs 25500,All India,Permanent,https://example.com/syl.pdf,https://ssc.gov.in\n"
    ",,,,,,,,,,\n"
    ",Bank PO,Probationary officer,Banking,45400,,,,,,\n"
)


@pytest.fixture
def mapper():
    """Create a mapper without pinned postings and a fixed clock."""
    return RecordMapper(pinned=[], today=lambda: TODAY)


@pytest.fixture
def rows():
    return parse_csv(SHEET)


def test_maps_rows_to_postings(mapper, rows):
    """Test field mapping for a fully populated row."""
    postings = mapper.map_rows(rows)

    assert len(postings) == 3
    first = postings[0]
    assert first == JobPosting(
        id="ssc-1",
        title="SSC CGL 2024",
        description="Combined graduate level",
        category="SSC",
        start_date="10/06/2024",
        last_date="24/07/2024",
        salary="Rs 25500",
        location="All India",
        employment_type="Permanent",
        syllabus_link="https://example.com/syl.pdf",
        source_sheet_link="https://ssc.gov.in",
    )
    assert first.start_on == date(2024, 6, 10)
    assert first.last_on == date(2024, 7, 24)


def test_blank_fields_fall_back_to_sentinels(mapper, rows):
    """Test that blank required fields get sentinel values."""
    blank = mapper.map_rows(rows)[1]

    assert blank.id == "job-1"
    assert blank.title == "No Title"
    assert blank.description == "No Description"
    assert blank.category == "Other"
    assert blank.start_date is None
    assert blank.last_date is None
    assert blank.salary is None
    assert blank.syllabus_link is None
    assert not blank.has_title


def test_positional_ids_when_id_missing(mapper, rows):
    postings = mapper.map_rows(rows)

    assert [p.id for p in postings] == ["ssc-1", "job-1", "job-2"]
    assert postings[2].start_on == date(2024, 4, 18)


def test_employment_type_prefers_employment_type_column(mapper):
    rows = parse_csv(
        "job title,description,last date,start date,category,employment type,job type\n"
        "A,B,,,C,Contract,Permanent\n"
        "A,B,,,C,,Permanent\n"
    )

    postings = mapper.map_rows(rows)

    assert postings[0].employment_type == "Contract"
    assert postings[1].employment_type == "Permanent"


def test_empty_rows_are_not_an_error():
    """Test that an empty sheet maps to no postings, pinned ones included."""
    assert RecordMapper().map_rows([]) == []


@pytest.mark.parametrize("dropped", REQUIRED_COLUMNS)
def test_missing_required_column_raises(mapper, dropped):
    """Test that each required column is enforced and named in the error."""
    headers = [c for c in REQUIRED_COLUMNS if c != dropped]
    rows = [{h: "x" for h in headers}]

    with pytest.raises(DataFormatError) as exc_info:
        mapper.map_rows(rows)

    assert exc_info.value.missing_columns == [dropped]
    assert exc_info.value.kind is ErrorKind.DATA_FORMAT
    assert f"required columns: {dropped}." in str(exc_info.value)


def test_missing_columns_message_lists_all(mapper):
    with pytest.raises(DataFormatError) as exc_info:
        mapper.map_rows([{"job title": "x", "description": "y"}])

    assert str(exc_info.value) == (
        "Data Format Error: The spreadsheet is missing the following required "
        "columns: last date, start date, category. Please correct the sheet format."
    )


def test_missing_columns_ignores_case_and_padding():
    row = {" Job Title ": "", "DESCRIPTION": "", "last date": "", "start date": "", "Category": ""}

    assert missing_columns(row) == []


def test_default_pinned_posting_is_prepended(rows):
    """Test that the static posting comes first with today's start date."""
    postings = RecordMapper(today=lambda: TODAY).map_rows(rows)

    pinned = postings[0]
    assert pinned.id == DEFAULT_PINNED[0].id
    assert pinned.pinned is True
    assert pinned.start_date == TODAY
    assert pinned.last_date is None
    assert pinned.category == "RRB"
    assert len(postings) == len(rows) + 1


def test_pinned_posting_skips_column_validation():
    """Pinned postings do not need sheet columns."""
    notice = PinnedPosting(id="notice", title="Notice", description="Read me", start_date="01/01/2024")

    postings = RecordMapper(pinned=[notice], today=lambda: TODAY).map_rows(
        parse_csv("job title,description,last date,start date,category\nA,B,,,C")
    )

    assert postings[0].id == "notice"
    assert postings[0].start_on == date(2024, 1, 1)


def test_pinned_from_config():
    pinned = pinned_from_config([
        {"id": "x", "title": "T", "description": "D", "link": "https://example.com"},
    ])

    assert pinned == [PinnedPosting(id="x", title="T", description="D", link="https://example.com")]
    assert pinned_from_config(None) == []


def test_pinned_from_config_requires_fields():
    with pytest.raises(ValueError, match="title"):
        pinned_from_config([{"id": "x", "description": "D"}])


def test_map_rows_convenience(rows):
    assert [p.id for p in map_rows(rows, pinned=[])] == ["ssc-1", "job-1", "job-2"]


def test_round_trip_reproduces_records(mapper):
    """Test that records written to CSV map back field-for-field."""
    originals = [
        JobPosting(id="a", title="Clerk", description='Says "hi", twice', category="SSC",
                   start_date="01/02/2024", last_date="2024-03-01", location="Delhi"),
        JobPosting(id="b", title="Driver", description="Line one\nline two", category="Transport",
                   start_date="45000", salary="20000"),
    ]
    columns = [
        ("id", "id"), ("job title", "title"), ("description", "description"),
        ("category", "category"), ("start date", "start_date"), ("last date", "last_date"),
        ("salary", "salary"), ("location", "location"),
    ]

    def cell(value):
        return '"' + (value or "").replace('"', '""') + '"'

    lines = [",".join(name for name, _ in columns)]
    for posting in originals:
        lines.append(",".join(cell(getattr(posting, attr)) for _, attr in columns))

    assert mapper.map_rows(parse_csv("\n".join(lines))) == originals
