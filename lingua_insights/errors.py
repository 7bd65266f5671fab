"""
Error taxonomy shared by ingestion, the AI client and the orchestrators.

Every error carries a human-readable message; the HTTP layer passes it
through as the response detail.
"""

from typing import Optional


class InsightError(Exception):
    """Base class for all errors raised by this package."""


# --- ingestion ---

class IngestionError(InsightError):
    pass


class InvalidTypeError(IngestionError):
    def __init__(self, message: str = "Please select a valid CSV file."):
        super().__init__(message)


class TooLargeError(IngestionError):
    def __init__(self, message: str = "File is too large. Please upload a file smaller than 5MB."):
        super().__init__(message)


class ParseError(IngestionError):
    def __init__(self, message: str = "Error parsing CSV file. Please check the file format."):
        super().__init__(message)


# --- AI gateway ---

class AiClientError(InsightError):
    pass


class MissingCredentialError(AiClientError):
    def __init__(self, message: str = "OPENROUTER_API_KEY is not set in the environment variables."):
        super().__init__(message)


class GatewayError(AiClientError):
    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class MalformedResponseError(AiClientError):
    pass


# --- orchestration ---

class _WrappedFailure(InsightError):
    prefix = ""

    def __init__(self, cause: Exception):
        super().__init__(f"{self.prefix} {cause}")
        self.cause = cause


class AnalysisFailure(_WrappedFailure):
    prefix = "Failed to analyze data."


class ChatFailure(_WrappedFailure):
    prefix = "Failed to get a response from the AI."


class ChartDownloadError(InsightError):
    def __init__(self, message: str = "Failed to download chart."):
        super().__init__(message)
