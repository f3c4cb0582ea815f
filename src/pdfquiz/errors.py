"""Error taxonomy shared by the extractor and the OCR engine.

Every failure the ingestion pipeline reports carries an ErrorKind so that
callers can branch on the category (unlock the file, pick another file,
reload, offer OCR) without parsing message strings.
"""

from enum import Enum


class ErrorKind(Enum):
    """Category of an ingestion failure."""

    EMPTY_FILE = "empty_file"
    EMPTY_DOCUMENT = "empty_document"
    PASSWORD_PROTECTED = "password_protected"
    INVALID_FORMAT = "invalid_format"
    LIBRARY_LOAD_FAILURE = "library_load_failure"
    ENCODING_FAILURE = "encoding_failure"
    PAGE_EXTRACTION_TIMEOUT = "page_extraction_timeout"
    OCR_CANCELLED = "ocr_cancelled"
    OCR_NO_TEXT_RECOGNIZED = "ocr_no_text_recognized"
    OCR_RESOURCE_EXHAUSTION = "ocr_resource_exhaustion"
    OCR_FAILURE = "ocr_failure"
    UNKNOWN = "unknown"

    @property
    def retryable(self) -> bool:
        """Whether the user can reasonably retry the same file."""
        return self in (ErrorKind.LIBRARY_LOAD_FAILURE, ErrorKind.OCR_RESOURCE_EXHAUSTION)


class IngestError(Exception):
    """Base class for ingestion errors carrying an ErrorKind."""

    kind: ErrorKind = ErrorKind.UNKNOWN

    def __init__(self, message: str, kind: ErrorKind | None = None) -> None:
        super().__init__(message)
        self.message = message
        if kind is not None:
            self.kind = kind


class DocumentOpenError(IngestError):
    """The PDF could not be opened (encrypted, corrupt, or no parser)."""

    kind = ErrorKind.INVALID_FORMAT


class EngineLoadError(IngestError):
    """A parsing or recognition engine could not be loaded or initialized."""

    kind = ErrorKind.LIBRARY_LOAD_FAILURE


class OCRError(IngestError):
    """An OCR run failed as a whole."""

    kind = ErrorKind.OCR_FAILURE


class OCRCancelled(OCRError):
    """The caller cancelled an OCR run. Not a failure to display."""

    kind = ErrorKind.OCR_CANCELLED

    def __init__(self, message: str = "OCR cancelled by caller") -> None:
        super().__init__(message)
