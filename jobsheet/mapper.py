"""Mapping of parsed sheet rows to JobPosting objects."""
from dataclasses import dataclass
from datetime import date
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence
import logging

from .dates import utc_today
from .errors import DataFormatError
from .models import (
    JobPosting,
    SENTINEL_TITLE,
    SENTINEL_DESCRIPTION,
    DEFAULT_CATEGORY,
)

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS = ("job title", "description", "last date", "start date", "category")

# Optional column -> JobPosting attribute. Tuples are tried in order.
OPTIONAL_COLUMNS = {
    "salary": ("salary",),
    "responsibilities": ("responsibilities",),
    "location": ("location",),
    "employment_type": ("employment type", "job type"),
    "required_documents": ("required documents",),
    "source_sheet_link": ("link",),
    "blog_content": ("blog content",),
    "syllabus_link": ("syllabuslink",),
}


@dataclass(frozen=True)
class PinnedPosting:
    """A posting injected ahead of the sheet rows.

    Attributes:
        id: Fixed identifier
        title: Posting title
        description: Posting description
        category: Category for faceting
        link: Link the posting points to
        employment_type: Label shown in the employment type slot
        start_date: Fixed start date; None means "today" at mapping time
        last_date: Application deadline, if any
    """
    id: str
    title: str
    description: str
    category: str = DEFAULT_CATEGORY
    link: Optional[str] = None
    employment_type: Optional[str] = None
    start_date: Any = None
    last_date: Any = None

    def build(self, today: date) -> JobPosting:
        return JobPosting(
            id=self.id,
            title=self.title,
            description=self.description,
            category=self.category,
            start_date=self.start_date if self.start_date is not None else today,
            last_date=self.last_date,
            employment_type=self.employment_type,
            source_sheet_link=self.link,
            pinned=True,
        )

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "PinnedPosting":
        """Build from a config mapping; requires id, title and description."""
        missing = [key for key in ("id", "title", "description") if not data.get(key)]
        if missing:
            raise ValueError(f"Pinned posting is missing: {', '.join(missing)}")
        return cls(
            id=str(data["id"]),
            title=data["title"],
            description=data["description"],
            category=data.get("category") or DEFAULT_CATEGORY,
            link=data.get("link"),
            employment_type=data.get("employment_type"),
            start_date=data.get("start_date"),
            last_date=data.get("last_date"),
        )


DEFAULT_PINNED = (
    PinnedPosting(
        id="static-rrb-group-d",
        title="RRB Group - D City Intimation",
        description=(
            "Direct link to RRB Group-D candidate login for city intimation, "
            "score card, and shortlist."
        ),
        category="RRB",
        link="https://rrb.digialm.com//EForms/configuredHtml/33015/96410/login.html",
        employment_type="Click Here",
    ),
)


def missing_columns(row: Mapping[str, str],
                    required: Sequence[str] = REQUIRED_COLUMNS) -> List[str]:
    """Return the required columns absent from a row, in required order.

    Args:
        row: A parsed row (its keys are the sheet headers)
        required: Column names that must be present

    Returns:
        List of missing column names
    """
    present = {key.strip().lower() for key in row}
    return [column for column in required if column not in present]


def _optional(row: Mapping[str, str], columns: Sequence[str]) -> Optional[str]:
    for column in columns:
        value = row.get(column)
        if value:
            return value
    return None


class RecordMapper:
    """Validates parsed rows and maps them to postings."""

    def __init__(self, pinned: Optional[Sequence[PinnedPosting]] = None,
                 today: Callable[[], date] = utc_today):
        """Initialize the mapper.

        Args:
            pinned: Postings to prepend; defaults to DEFAULT_PINNED
            today: Clock returning the current UTC date for pinned postings
        """
        self.pinned = tuple(DEFAULT_PINNED if pinned is None else pinned)
        self.today = today

    def map_row(self, row: Mapping[str, str], index: int) -> JobPosting:
        """Map a single row; blank required fields fall back to sentinels."""
        optional = {attr: _optional(row, columns) for attr, columns in OPTIONAL_COLUMNS.items()}
        return JobPosting(
            id=row.get("id") or f"job-{index}",
            title=row.get("job title") or SENTINEL_TITLE,
            description=row.get("description") or SENTINEL_DESCRIPTION,
            category=row.get("category") or DEFAULT_CATEGORY,
            start_date=row.get("start date") or None,
            last_date=row.get("last date") or None,
            **optional,
        )

    def map_rows(self, rows: Sequence[Mapping[str, str]]) -> List[JobPosting]:
        """Map parsed rows to postings, pinned postings first.

        Args:
            rows: Output of parse_csv

        Returns:
            List of JobPosting objects; empty when there are no rows

        Raises:
            DataFormatError: If a required column is missing
        """
        if not rows:
            logger.info("Sheet has no data rows")
            return []

        missing = missing_columns(rows[0])
        if missing:
            raise DataFormatError(missing)

        postings = [self.map_row(row, index) for index, row in enumerate(rows)]
        today = self.today()
        pinned = [entry.build(today) for entry in self.pinned]

        logger.info(f"Mapped {len(postings)} postings ({len(pinned)} pinned)")
        return pinned + postings


def map_rows(rows: Sequence[Mapping[str, str]],
             pinned: Optional[Sequence[PinnedPosting]] = None) -> List[JobPosting]:
    """Map parsed rows to postings with a default RecordMapper."""
    return RecordMapper(pinned=pinned).map_rows(rows)


def pinned_from_config(items: Optional[Sequence[Dict[str, Any]]]) -> List[PinnedPosting]:
    """Build pinned postings from a config list."""
    return [PinnedPosting.from_dict(item) for item in items or []]
