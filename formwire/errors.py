from __future__ import annotations


class FormwireError(Exception):
    """Base error for formwire."""


class MultipartError(FormwireError):
    """Raised when a multipart body cannot be encoded."""

    # Set by encode_to_file() to the partially written output, if any.
    output_path: str | None = None


class InvalidFileError(MultipartError):
    """Raised when a file cannot be stat'd, opened or created."""

    def __init__(self, path: str, message: str | None = None) -> None:
        self.path = path
        super().__init__(message or f"Invalid file: {path}")


class InvalidOutputFileError(InvalidFileError):
    """Raised when the encoded output file cannot be created or measured."""

    def __init__(self, path: str, message: str | None = None) -> None:
        super().__init__(path, message or f"Invalid output file: {path}")


class StreamError(MultipartError):
    """Raised when a read or write fails part way through encoding."""

    def __init__(self, message: str = "Stream error", output_path: str | None = None) -> None:
        self.output_path = output_path
        super().__init__(message)


class TooMuchDataForMemoryError(MultipartError):
    """Raised when parts are too large to be encoded in memory."""

    def __init__(self, total: int, limit: int) -> None:
        self.total = total
        self.limit = limit
        super().__init__(
            f"Too much data for memory: {total} payload bytes (limit {limit})"
        )


class RequestError(FormwireError):
    """Raised when an HTTPRequest cannot be built."""


class InvalidRequestBodyError(RequestError):
    """Raised when GET or DELETE requests are given a body."""

    def __init__(self, message: str = "GET and DELETE requests cannot have a body") -> None:
        super().__init__(message)


class InvalidFormDataError(RequestError):
    """Raised when form parameters cannot be encoded."""


class ResponseError(FormwireError):
    """Raised for HTTP response issues."""


class HTTPStatusError(ResponseError):
    """The server answered with a non-2xx status code."""

    def __init__(self, status_code: int) -> None:
        self.status_code = status_code
        super().__init__(f"HTTP request failed with status {status_code}")


class UnknownResponseError(ResponseError):
    """The transport gave neither a status nor an error."""

    def __init__(self, message: str = "An unknown error occurred") -> None:
        super().__init__(message)


class InvalidResponseError(ResponseError):
    """Raised when a response is not a valid HTTP response."""

    def __init__(self, message: str = "Invalid HTTP response") -> None:
        super().__init__(message)


def _truncated(text: str, max_chars: int = 50) -> str:
    return text if len(text) < max_chars else f"{text[:max_chars]}..."


class HTTPError(ResponseError):
    """Raised by raise_for_status() for non-success responses."""

    def __init__(self, status_code: int, body: bytes = b"", url: str | None = None) -> None:
        self.status_code = status_code
        self.body = body
        self.url = url
        try:
            body_text = body.decode("utf-8")
        except UnicodeDecodeError:
            body_text = f"<{len(body)} bytes of non-UTF8 data>"
        super().__init__(
            f"HTTP {status_code} error. Response body: {_truncated(body_text)}"
        )
