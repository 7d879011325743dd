"""Tests for dropping closed postings from the ticker."""
import pytest
from datetime import date, timedelta
from jobsheet.models import JobPosting
from jobsheet.views import ticker_postings, TICKER_LIMIT

TODAY = date(2024, 7, 1)


def posting(id, last=None, start="01/06/2024", title="Test Posting"):
    return JobPosting(id=id, title=title, description="Test description",
                      category="SSC", start_date=start, last_date=last)


class TestPostingExpiration:
    """Test deadline handling for the ticker view."""

    def test_posting_dropped_when_deadline_passed(self):
        """Test that a posting whose last date was yesterday is dropped."""
        yesterday = (TODAY - timedelta(days=1)).strftime("%d/%m/%Y")

        assert ticker_postings([posting("old", last=yesterday)], today=TODAY) == []

    def test_posting_kept_on_deadline_day(self):
        """Test that a posting closing today is still shown."""
        kept = posting("today", last=TODAY.strftime("%d/%m/%Y"))

        assert ticker_postings([kept], today=TODAY) == [kept]

    def test_posting_kept_when_deadline_in_future(self):
        kept = posting("future", last=TODAY + timedelta(days=5))

        assert ticker_postings([kept], today=TODAY) == [kept]

    @pytest.mark.parametrize("last", [None, "", "not a date", "30th June"])
    def test_posting_without_deadline_is_kept(self, last):
        """Test that missing or unparseable deadlines never hide a posting."""
        kept = posting("open", last=last)

        assert ticker_postings([kept], today=TODAY) == [kept]

    def test_expired_posting_dropped_from_list(self):
        """Test filtering a mixed list keeps recency order."""
        postings = [
            posting("closed", last="30/06/2024", start="20/06/2024"),
            posting("open-old", last="31/07/2024", start="01/05/2024"),
            posting("open-new", last=None, start="25/06/2024"),
            posting("untitled", last=None, start="28/06/2024", title="No Title"),
        ]

        result = ticker_postings(postings, today=TODAY)

        assert [p.id for p in result] == ["open-new", "open-old"]

    def test_ticker_is_capped(self):
        postings = [posting(str(i), start=f"{i + 1:02d}/06/2024") for i in range(15)]

        result = ticker_postings(postings, today=TODAY)

        assert len(result) == TICKER_LIMIT == 10
        assert result[0].id == "14"

    def test_ticker_defaults_to_utc_today(self):
        far_future = posting("future", last="31/12/2999")
        long_gone = posting("past", last="01/01/2000")

        assert ticker_postings([far_future, long_gone]) == [far_future]

    def test_year_less_deadline_does_not_expire_posting(self):
        """Test that a deadline without a year is treated as missing, not as 1970."""
        kept = posting("no-year", last="30th June", start="15/06/2024")
        undated = posting("no-year-start", last=None, start="30th June")

        assert ticker_postings([undated, kept], today=TODAY) == [kept, undated]
