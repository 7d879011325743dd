"""Job postings and practice exams from spreadsheet exports."""

from .models import JobPosting, MockExam, SheetFeed
from .fetcher import PostingFetcher, ExamFetcher, FetchResult

__all__ = ['JobPosting', 'MockExam', 'SheetFeed', 'PostingFetcher', 'ExamFetcher', 'FetchResult']
