"""Data models for the jobsheet application."""
from dataclasses import dataclass, field, fields
from datetime import date
from typing import Optional, Dict, Any

from .dates import parse_date, to_display, to_iso_date

SENTINEL_TITLE = "No Title"
SENTINEL_DESCRIPTION = "No Description"
DEFAULT_CATEGORY = "Other"

_DATE_FIELDS = ("start_date", "last_date")


@dataclass(frozen=True)
class JobPosting:
    """Represents one job posting from the sheet, or a pinned synthetic entry.

    Attributes:
        id: Unique identifier within a fetched batch
        title: Job title ("No Title" when the sheet cell was blank)
        description: Job description ("No Description" when blank)
        category: Category used for faceting ("Other" when blank)
        start_date: Raw start date as found in the sheet (not normalized)
        last_date: Raw application deadline as found in the sheet
        salary: Salary text
        responsibilities: Responsibilities text
        location: Job location
        employment_type: Employment or job type (e.g. "Permanent", "Contract")
        required_documents: Documents an applicant needs
        source_sheet_link: Link to the official notification or application
        blog_content: Long-form article text
        syllabus_link: Link to a downloadable syllabus
        pinned: Whether the posting was injected rather than read from the sheet
    """
    id: str
    title: str
    description: str
    category: str = DEFAULT_CATEGORY
    start_date: Any = None
    last_date: Any = None
    salary: Optional[str] = None
    responsibilities: Optional[str] = None
    location: Optional[str] = None
    employment_type: Optional[str] = None
    required_documents: Optional[str] = None
    source_sheet_link: Optional[str] = None
    blog_content: Optional[str] = None
    syllabus_link: Optional[str] = None
    pinned: bool = False

    def __post_init__(self):
        """Validate required fields."""
        if not self.id or not isinstance(self.id, str) or not self.id.strip():
            raise ValueError("Posting ID is required and must be a non-empty string")

    @property
    def start_on(self) -> Optional[date]:
        """Normalized start date."""
        return parse_date(self.start_date)

    @property
    def last_on(self) -> Optional[date]:
        """Normalized application deadline."""
        return parse_date(self.last_date)

    @property
    def has_title(self) -> bool:
        return self.title != SENTINEL_TITLE

    @property
    def has_syllabus(self) -> bool:
        return bool(self.syllabus_link)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to a JSON-friendly dict with ISO and display dates."""
        data: Dict[str, Any] = {}
        for f in fields(self):
            value = getattr(self, f.name)
            if f.name in _DATE_FIELDS:
                data[f.name] = to_iso_date(value)
                data[f"{f.name}_display"] = to_display(value)
            else:
                data[f.name] = value
        return data


@dataclass(frozen=True)
class MockExam:
    """A practice exam listed in the exam catalog sheet."""
    exam_id: str
    name: str
    exam_type: str = DEFAULT_CATEGORY
    total_questions: int = 0
    duration_minutes: int = 0
    negative_marking: float = 0.0
    published: bool = False

    def __post_init__(self):
        if not self.exam_id or not self.exam_id.strip():
            raise ValueError("Exam ID is required and must be a non-empty string")

    def to_dict(self) -> Dict[str, Any]:
        return {f.name: getattr(self, f.name) for f in fields(self)}


@dataclass
class SheetFeed:
    """Represents a spreadsheet feed configuration.

    Attributes:
        name: Feed name
        url: CSV export URL or local file path
        type: Feed type ("postings" or "exams")
        cache_ttl: Seconds a fetched result stays fresh
        timeout: HTTP request timeout in seconds
        max_retries: Retries for transient transport failures
        headers: Custom HTTP headers
    """
    name: str
    url: str
    type: str = "postings"
    cache_ttl: float = 300
    timeout: float = 10
    max_retries: int = 0
    headers: Dict[str, str] = field(default_factory=dict)

    def __post_init__(self):
        """Validate required fields."""
        if not self.url or not isinstance(self.url, str) or not self.url.strip():
            raise ValueError("Feed URL is required and must be a non-empty string")
