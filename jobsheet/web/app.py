"""JSON API for jobsheet."""
import logging
from pathlib import Path
from typing import List, Optional

from fastapi import FastAPI, Query
from fastapi.responses import JSONResponse
import uvicorn

from ..config import resolve_feeds, find_feed, load_pinned, config
from ..errors import ErrorKind
from ..exams import exams_by_type
from ..fetcher import PostingFetcher, ExamFetcher, FetchResult
from ..mapper import RecordMapper
from ..views import category_facets, filter_postings, latest_postings, ticker_postings

logger = logging.getLogger(__name__)


def _error_response(result: FetchResult) -> JSONResponse:
    status_code = 502 if result.error_kind is ErrorKind.TRANSPORT else 500
    return JSONResponse(status_code=status_code, content=result.to_dict())


def _ok_response(data, result: FetchResult) -> dict:
    return {"data": data, "error": None, "kind": None, "stale": result.stale}


def _not_configured(feed_type: str) -> JSONResponse:
    return JSONResponse(
        status_code=500,
        content={
            "data": [],
            "error": f"Server configuration error: no {feed_type} feed is configured.",
            "kind": ErrorKind.UNEXPECTED.value,
            "stale": False,
        },
    )


def create_app(posting_fetcher: Optional[PostingFetcher] = None,
               exam_fetcher: Optional[ExamFetcher] = None,
               config_file: Optional[str] = None) -> FastAPI:
    """Create and configure the FastAPI app.

    Fetchers are built from the feeds configuration unless given. Each app
    holds its own fetchers, and so its own caches.
    """
    if posting_fetcher is None or exam_fetcher is None:
        path = Path(config_file) if config_file else None
        feeds = resolve_feeds(path)
        if posting_fetcher is None:
            feed = find_feed(feeds, "postings")
            if feed is not None:
                posting_fetcher = PostingFetcher(feed, mapper=RecordMapper(pinned=load_pinned(path)))
        if exam_fetcher is None:
            feed = find_feed(feeds, "exams")
            if feed is not None:
                exam_fetcher = ExamFetcher(feed)

    view_config = config.get_view_config()
    app = FastAPI(title="jobsheet API", version="1.0",
                  description="Job postings and practice exams from spreadsheet exports")

    @app.get("/api/jobs")
    def get_jobs(category: List[str] = Query(default=[]), q: str = "", refresh: bool = False):
        """Postings, optionally filtered by category and search text."""
        if posting_fetcher is None:
            return _not_configured("postings")
        result = posting_fetcher.fetch_postings(force_refresh=refresh)
        if not result.ok:
            return _error_response(result)
        filtered = filter_postings(result.data, categories=category, text=q)
        return _ok_response([posting.to_dict() for posting in filtered], result)

    @app.get("/api/jobs/latest")
    def get_latest(limit: int = view_config['latest_limit']):
        if posting_fetcher is None:
            return _not_configured("postings")
        result = posting_fetcher.fetch_postings()
        if not result.ok:
            return _error_response(result)
        return _ok_response([p.to_dict() for p in latest_postings(result.data, limit=limit)], result)

    @app.get("/api/jobs/ticker")
    def get_ticker(limit: int = view_config['ticker_limit']):
        if posting_fetcher is None:
            return _not_configured("postings")
        result = posting_fetcher.fetch_postings()
        if not result.ok:
            return _error_response(result)
        return _ok_response([p.to_dict() for p in ticker_postings(result.data, limit=limit)], result)

    @app.get("/api/categories")
    def get_categories():
        if posting_fetcher is None:
            return _not_configured("postings")
        result = posting_fetcher.fetch_postings()
        if not result.ok:
            return _error_response(result)
        return _ok_response(category_facets(result.data), result)

    @app.get("/api/exams")
    def get_exams(refresh: bool = False):
        """Published exams grouped by exam type."""
        if exam_fetcher is None:
            return _not_configured("exams")
        result = exam_fetcher.fetch_exams(force_refresh=refresh)
        if not result.ok:
            return _error_response(result)
        grouped = exams_by_type(result.data)
        return _ok_response({exam_type: [exam.to_dict() for exam in exams]
                             for exam_type, exams in grouped.items()}, result)

    @app.on_event("startup")
    async def startup_event():
        logger.info("jobsheet API starting up...")
        logger.info(f"Postings feed: {posting_fetcher.feed.url if posting_fetcher else 'not configured'}")

    return app


def run_server(host: str = "127.0.0.1", port: int = 8000, config_file: Optional[str] = None) -> None:
    """Run the API with uvicorn."""
    app = create_app(config_file=config_file)
    uvicorn.run(app, host=host, port=port)
