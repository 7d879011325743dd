"""Derived views over a posting collection: facets, filtering and recency."""
from dataclasses import dataclass
from datetime import date
from typing import Callable, Iterable, List, Optional, Sequence, Tuple
import logging

from .dates import utc_today
from .models import JobPosting

logger = logging.getLogger(__name__)

LATEST_LIMIT = 4
TICKER_LIMIT = 10


@dataclass(frozen=True)
class VirtualFacet:
    """A facet computed from a predicate instead of the category column."""
    name: str
    predicate: Callable[[JobPosting], bool]

    def applies_to(self, posting: JobPosting) -> bool:
        return bool(self.predicate(posting))


SYLLABUS_FACET = VirtualFacet("Syllabus", lambda posting: posting.has_syllabus)

DEFAULT_VIRTUAL_FACETS: Tuple[VirtualFacet, ...] = (SYLLABUS_FACET,)


def category_facets(postings: Iterable[JobPosting],
                    virtual_facets: Sequence[VirtualFacet] = DEFAULT_VIRTUAL_FACETS) -> List[str]:
    """List the facets available for a posting collection.

    Args:
        postings: Postings to inspect
        virtual_facets: Computed facets to offer when any posting satisfies them

    Returns:
        Sorted distinct non-empty categories, followed by applicable virtual facets
    """
    postings = list(postings)
    categories = sorted({posting.category for posting in postings if posting.category})
    for facet in virtual_facets:
        if any(facet.applies_to(posting) for posting in postings):
            categories.append(facet.name)
    return categories


@dataclass(frozen=True)
class FilterState:
    """Caller-selected filter values."""
    categories: Tuple[str, ...] = ()
    text: str = ""


class PostingFilter:
    """Matches postings against a category selection and search text."""

    def __init__(self, state: FilterState,
                 virtual_facets: Sequence[VirtualFacet] = DEFAULT_VIRTUAL_FACETS):
        """Initialize the posting filter.

        Args:
            state: Selected categories and search text
            virtual_facets: Computed facets that may appear in the selection
        """
        self.state = state
        self.selected = set(state.categories)
        self.needle = state.text.lower()
        self.virtual_facets = [facet for facet in virtual_facets if facet.name in self.selected]

    def matches_category(self, posting: JobPosting) -> bool:
        """Check the posting against the selected categories (OR-ed).

        Args:
            posting: Posting to check

        Returns:
            bool: True if nothing is selected, the category is selected, or a
            selected virtual facet applies
        """
        if not self.selected:
            return True
        if posting.category and posting.category in self.selected:
            return True
        return any(facet.applies_to(posting) for facet in self.virtual_facets)

    def matches_text(self, posting: JobPosting) -> bool:
        """Case-insensitive substring search over title and description."""
        if not self.needle:
            return True
        return self.needle in posting.title.lower() or self.needle in posting.description.lower()

    def matches(self, posting: JobPosting) -> bool:
        return self.matches_category(posting) and self.matches_text(posting)

    def filter_postings(self, postings: Iterable[JobPosting]) -> List[JobPosting]:
        """Filter postings, keeping their order.

        Args:
            postings: Postings to filter

        Returns:
            List[JobPosting]: Matching postings
        """
        filtered = [posting for posting in postings if self.matches(posting)]
        logger.debug(f"Filter {self.state} kept {len(filtered)} postings")
        return filtered


def filter_postings(postings: Iterable[JobPosting], categories: Iterable[str] = (),
                    text: str = "",
                    virtual_facets: Sequence[VirtualFacet] = DEFAULT_VIRTUAL_FACETS) -> List[JobPosting]:
    """Filter postings by category selection and search text."""
    state = FilterState(categories=tuple(categories), text=text or "")
    return PostingFilter(state, virtual_facets).filter_postings(postings)


def sort_by_recency(postings: Iterable[JobPosting]) -> List[JobPosting]:
    """Sort titled postings by start date, newest first.

    Postings titled with the "No Title" sentinel are dropped. Postings without
    a parseable start date go last; ties keep their original order.
    """
    def key(posting: JobPosting):
        start = posting.start_on
        if start is None:
            return (1, 0)
        return (0, -start.toordinal())

    return sorted((posting for posting in postings if posting.has_title), key=key)


def latest_postings(postings: Iterable[JobPosting], limit: int = LATEST_LIMIT) -> List[JobPosting]:
    """The most recent postings."""
    return sort_by_recency(postings)[:limit]


def ticker_postings(postings: Iterable[JobPosting], today: Optional[date] = None,
                    limit: int = TICKER_LIMIT) -> List[JobPosting]:
    """Most recent postings that are still open.

    Args:
        postings: Postings to choose from
        today: Current UTC date; defaults to utc_today()
        limit: Maximum number of postings

    Returns:
        Recency-sorted postings whose deadline is missing, unparseable, or on
        or after today
    """
    if today is None:
        today = utc_today()
    open_postings = [
        posting for posting in sort_by_recency(postings)
        if posting.last_on is None or posting.last_on >= today
    ]
    return open_postings[:limit]
