"""Error types raised while loading a sheet feed."""
from enum import Enum
from typing import Iterable, Optional

NETWORK_ERROR_MESSAGE = (
    "Network Error: Could not connect to the data source. Please check your "
    "internet connection and try again. If the problem persists, the data "
    "sheet may be private or unavailable."
)
NON_CSV_MESSAGE = (
    "Received non-CSV data from the sheet URL. Please ensure the URL is a "
    'public Google Sheet with "/export?format=csv" at the end.'
)
UNEXPECTED_ERROR_MESSAGE = (
    "An unexpected error occurred while loading the data. Please try again later."
)


class ErrorKind(Enum):
    """Categories of feed failure surfaced to consumers."""
    TRANSPORT = "transport"
    DATA_FORMAT = "data_format"
    UNEXPECTED = "unexpected"


class FeedError(Exception):
    """Base class for feed loading failures."""
    kind = ErrorKind.UNEXPECTED

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.cause = cause

    @property
    def user_message(self) -> str:
        """Message safe to show to end users."""
        return str(self)


class TransportError(FeedError):
    """Network failure, non-2xx response or non-CSV content."""
    kind = ErrorKind.TRANSPORT

    def __init__(self, message: str = NETWORK_ERROR_MESSAGE,
                 cause: Optional[BaseException] = None,
                 status_code: Optional[int] = None):
        super().__init__(message, cause)
        self.status_code = status_code


class DataFormatError(FeedError):
    """The sheet is missing required columns."""
    kind = ErrorKind.DATA_FORMAT

    def __init__(self, missing_columns: Iterable[str]):
        self.missing_columns = list(missing_columns)
        super().__init__(
            "Data Format Error: The spreadsheet is missing the following "
            f"required columns: {', '.join(self.missing_columns)}. "
            "Please correct the sheet format."
        )


class UnexpectedError(FeedError):
    """Any other failure while loading or mapping a feed."""
    kind = ErrorKind.UNEXPECTED

    def __init__(self, cause: Optional[BaseException] = None):
        super().__init__(UNEXPECTED_ERROR_MESSAGE, cause)
