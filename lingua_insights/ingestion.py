"""
CSV upload validation and parsing.

Rationale:
- Reject wrong file types and oversized files before touching the parser.
- pandas does the parsing; every cell is kept as a string so the prompts see
  exactly what the user uploaded.
- Rows are projected through the header order, so each row lines up with
  `headers` no matter how the parser ordered its record fields.
- UploadTracker mirrors the uploader's lifecycle and lets a caller discard a
  parse that was superseded by a newer selection.
"""

import enum
import io
import logging
from dataclasses import dataclass
from typing import List, Optional

import pandas as pd

from .config import DEFAULT_MAX_UPLOAD_BYTES
from .errors import IngestionError, InvalidTypeError, ParseError, TooLargeError
from .schemas import FileMeta, TabularData

logger = logging.getLogger(__name__)

CSV_MEDIA_TYPE = "text/csv"
CSV_SUFFIX = ".csv"


def file_meta(upload) -> FileMeta:
    return FileMeta(
        name=getattr(upload, "filename", None) or "uploaded.csv",
        content_type=getattr(upload, "content_type", None),
        size=getattr(upload, "size", None),
    )


def _too_large(max_bytes: int) -> TooLargeError:
    limit_mb = max_bytes / (1024 * 1024)
    return TooLargeError(f"File is too large. Please upload a file smaller than {limit_mb:g}MB.")


def check_upload(upload, max_bytes: int = DEFAULT_MAX_UPLOAD_BYTES) -> None:
    """Type and size checks that need only the file metadata."""
    name = getattr(upload, "filename", None) or ""
    if getattr(upload, "content_type", None) != CSV_MEDIA_TYPE and not name.endswith(CSV_SUFFIX):
        raise InvalidTypeError()
    size = getattr(upload, "size", None)
    if size is not None and size > max_bytes:
        raise _too_large(max_bytes)


def parse_csv_bytes(content: bytes) -> TabularData:
    """
    Parse raw CSV bytes: first row is the header, blank lines are skipped.
    Any parser complaint becomes a ParseError; no partial data is returned.
    """
    try:
        df = pd.read_csv(
            io.BytesIO(content),
            dtype=str,
            keep_default_na=False,
            skip_blank_lines=True,
        )
    except (pd.errors.ParserError, pd.errors.EmptyDataError, UnicodeDecodeError) as e:
        logger.error(f"CSV parsing errors: {type(e).__name__}: {e}")
        raise ParseError() from e

    # short rows come back as NaN; cells that are present but empty are ""
    if df.isna().to_numpy().any():
        logger.error("CSV parsing errors: data rows are narrower than the header row")
        raise ParseError()

    # pandas silently turns the first column into the index when every data
    # row has one field more than the header
    if len(df.index) and not isinstance(df.index, pd.RangeIndex):
        logger.error("CSV parsing errors: data rows are wider than the header row")
        raise ParseError()

    headers: List[str] = [str(col) for col in df.columns]
    records = df.to_dict(orient="records")
    rows = [[str(record[header]) for header in headers] for record in records]

    logger.info(f"Parsed CSV with {len(rows)} rows and {len(headers)} columns")
    return TabularData(headers=headers, rows=rows)


async def validate_and_parse(upload, max_bytes: int = DEFAULT_MAX_UPLOAD_BYTES) -> TabularData:
    """
    Validate an uploaded file and parse it into TabularData.

    `upload` needs `filename`, `content_type`, `size` and an awaitable
    `read()`; FastAPI's UploadFile fits.
    """
    check_upload(upload, max_bytes)
    return await _read_and_parse(upload, file_meta(upload), max_bytes)


async def _read_and_parse(upload, meta: FileMeta, max_bytes: int) -> TabularData:
    content = await upload.read()
    if meta.size is None and len(content) > max_bytes:
        raise _too_large(max_bytes)

    logger.debug(f"Read {len(content)} bytes from {meta.name}")
    return parse_csv_bytes(content)


class UploadStatus(str, enum.Enum):
    EMPTY = "empty"
    SELECTED = "selected"
    PROCESSING = "processing"
    ERROR = "error"


@dataclass(frozen=True)
class UploadState:
    status: UploadStatus = UploadStatus.EMPTY
    file: Optional[FileMeta] = None
    message: Optional[str] = None


class UploadTracker:
    """
    Tracks one uploader: Empty -> Selected -> Processing -> Empty | Error.

    `select` hands out a token; results reported with an older token belong
    to a superseded selection and are dropped.
    """

    def __init__(self):
        self.state = UploadState()
        self._generation = 0

    def _is_current(self, token: int) -> bool:
        return token == self._generation

    def select(self, meta: FileMeta) -> int:
        self._generation += 1
        self.state = UploadState(UploadStatus.SELECTED, file=meta)
        return self._generation

    def start(self, token: int) -> bool:
        if not self._is_current(token):
            return False
        self.state = UploadState(UploadStatus.PROCESSING, file=self.state.file)
        return True

    def succeed(self, token: int, data: TabularData) -> Optional[TabularData]:
        if not self._is_current(token):
            logger.info("Discarding parse result of a superseded upload")
            return None
        self.state = UploadState()
        return data

    def fail(self, token: int, message: str) -> None:
        if not self._is_current(token):
            return
        self.state = UploadState(UploadStatus.ERROR, message=message)

    def clear(self) -> None:
        self._generation += 1
        self.state = UploadState()


async def ingest(upload, tracker: Optional[UploadTracker] = None,
                 max_bytes: int = DEFAULT_MAX_UPLOAD_BYTES) -> Optional[TabularData]:
    """
    Run one upload through the tracker and return the parsed data.

    Returns None when the upload was superseded while parsing. Ingestion
    errors are recorded on the tracker and re-raised.
    """
    tracker = tracker or UploadTracker()
    meta = file_meta(upload)
    token = tracker.select(meta)
    try:
        check_upload(upload, max_bytes)
        tracker.start(token)
        data = await _read_and_parse(upload, meta, max_bytes)
    except IngestionError as e:
        tracker.fail(token, str(e))
        raise
    return tracker.succeed(token, data)
