from __future__ import annotations

import json
import logging
import os
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Union

from .compression import decode_body
from .errors import (
    HTTPError,
    HTTPStatusError,
    InvalidRequestBodyError,
    InvalidResponseError,
    UnknownResponseError,
)
from .multipart import Part

logger = logging.getLogger(__name__)


class HTTPMethod(Enum):
    DELETE = "DELETE"
    GET = "GET"
    PATCH = "PATCH"
    POST = "POST"
    PUT = "PUT"

    def __str__(self) -> str:
        return self.value


class HTTPContentType(Enum):
    FORM_ENCODED = "application/x-www-form-urlencoded"
    NONE = "none"
    JSON = "application/json"
    MULTIPART = "multipart/form-data"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class FormParameters:
    parameters: Mapping[str, Any]


@dataclass(frozen=True)
class JSONParameters:
    parameters: Mapping[str, Any]


@dataclass(frozen=True)
class RawData:
    data: bytes
    content_type: str = "application/octet-stream"


@dataclass(frozen=True)
class MultipartBody:
    parts: Sequence[Part]


@dataclass(frozen=True)
class FileData:
    """A file streamed from disk as the whole request body."""

    path: str


RequestBody = Union[FormParameters, JSONParameters, RawData, MultipartBody, FileData, None]

# Parameter bodies on these methods are sent as a query string instead.
_QUERY_METHODS = (HTTPMethod.GET, HTTPMethod.DELETE)


@dataclass
class HTTPRequest:
    """
    Transport-independent description of an HTTP request.

    GET and DELETE requests only accept parameter bodies, which are encoded
    into the query string; anything else raises InvalidRequestBodyError.
    """

    method: HTTPMethod
    url: str
    body: RequestBody = None
    headers: dict[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not isinstance(self.method, HTTPMethod):
            self.method = HTTPMethod(str(self.method).upper())
        if self.method in _QUERY_METHODS and not (
            self.body is None or isinstance(self.body, (FormParameters, JSONParameters))
        ):
            raise InvalidRequestBodyError()

    @property
    def has_query_parameters(self) -> bool:
        return self.method in _QUERY_METHODS and isinstance(
            self.body, (FormParameters, JSONParameters)
        )

    @property
    def content_type(self) -> HTTPContentType | str:
        body = self.body
        if body is None or isinstance(body, FileData) or self.has_query_parameters:
            return HTTPContentType.NONE
        if isinstance(body, FormParameters):
            return HTTPContentType.FORM_ENCODED
        if isinstance(body, JSONParameters):
            return HTTPContentType.JSON
        if isinstance(body, MultipartBody):
            return HTTPContentType.MULTIPART
        return body.content_type

    @classmethod
    def get(cls, url: str, parameters: Mapping[str, Any] | None = None) -> HTTPRequest:
        return cls(HTTPMethod.GET, url, _form_or_none(parameters))

    @classmethod
    def delete(cls, url: str, parameters: Mapping[str, Any] | None = None) -> HTTPRequest:
        return cls(HTTPMethod.DELETE, url, _form_or_none(parameters))

    @classmethod
    def post(cls, url: str) -> HTTPRequest:
        return cls(HTTPMethod.POST, url)

    @classmethod
    def put(cls, url: str) -> HTTPRequest:
        return cls(HTTPMethod.PUT, url)

    @classmethod
    def patch(cls, url: str) -> HTTPRequest:
        return cls(HTTPMethod.PATCH, url)

    @classmethod
    def post_form(cls, url: str, parameters: Mapping[str, Any] | None = None) -> HTTPRequest:
        return cls(HTTPMethod.POST, url, _form_or_none(parameters))

    @classmethod
    def put_form(cls, url: str, parameters: Mapping[str, Any] | None = None) -> HTTPRequest:
        return cls(HTTPMethod.PUT, url, _form_or_none(parameters))

    @classmethod
    def patch_form(cls, url: str, parameters: Mapping[str, Any] | None = None) -> HTTPRequest:
        return cls(HTTPMethod.PATCH, url, _form_or_none(parameters))

    @classmethod
    def post_json(cls, url: str, body: Mapping[str, Any]) -> HTTPRequest:
        return cls(HTTPMethod.POST, url, JSONParameters(body))

    @classmethod
    def put_json(cls, url: str, body: Mapping[str, Any]) -> HTTPRequest:
        return cls(HTTPMethod.PUT, url, JSONParameters(body))

    @classmethod
    def patch_json(cls, url: str, body: Mapping[str, Any]) -> HTTPRequest:
        return cls(HTTPMethod.PATCH, url, JSONParameters(body))

    @classmethod
    def post_multipart(cls, url: str, parts: Iterable[Part]) -> HTTPRequest:
        return cls(HTTPMethod.POST, url, MultipartBody(tuple(parts)))

    @classmethod
    def put_multipart(cls, url: str, parts: Iterable[Part]) -> HTTPRequest:
        return cls(HTTPMethod.PUT, url, MultipartBody(tuple(parts)))

    @classmethod
    def patch_multipart(cls, url: str, parts: Iterable[Part]) -> HTTPRequest:
        return cls(HTTPMethod.PATCH, url, MultipartBody(tuple(parts)))

    @classmethod
    def post_data(cls, url: str, data: bytes, content_type: str) -> HTTPRequest:
        return cls(HTTPMethod.POST, url, RawData(data, content_type))

    @classmethod
    def put_data(cls, url: str, data: bytes, content_type: str) -> HTTPRequest:
        return cls(HTTPMethod.PUT, url, RawData(data, content_type))

    @classmethod
    def patch_data(cls, url: str, data: bytes, content_type: str) -> HTTPRequest:
        return cls(HTTPMethod.PATCH, url, RawData(data, content_type))

    @classmethod
    def post_file(cls, url: str, path: str | os.PathLike[str]) -> HTTPRequest:
        return cls(HTTPMethod.POST, url, FileData(os.fspath(path)))

    @classmethod
    def put_file(cls, url: str, path: str | os.PathLike[str]) -> HTTPRequest:
        return cls(HTTPMethod.PUT, url, FileData(os.fspath(path)))

    @classmethod
    def patch_file(cls, url: str, path: str | os.PathLike[str]) -> HTTPRequest:
        return cls(HTTPMethod.PATCH, url, FileData(os.fspath(path)))

    def __str__(self) -> str:
        return f"<HTTPRequest {self.method} {self.url}>"


def _form_or_none(parameters: Mapping[str, Any] | None) -> FormParameters | None:
    return FormParameters(parameters) if parameters is not None else None


class HTTPResponse:
    """
    Transport-independent HTTP response.

    Built from whatever the transport produced: a status (None when there was
    no HTTP response at all), headers, body and/or an error. Successful when
    there is no error and the status is 2xx.
    """

    def __init__(
        self,
        status_code: int | None,
        headers: Iterable[tuple[str, str]] = (),
        body: bytes | None = None,
        error: BaseException | None = None,
        reason: str = "",
        url: str | None = None,
        auto_decompress: bool = True,
    ) -> None:
        self.status_code = status_code
        self.reason = reason
        self.url = url
        self.raw_headers: list[tuple[str, str]] = list(headers)
        self._body = body
        self._auto_decompress = auto_decompress

        if status_code is None:
            self.error: BaseException | None = error or UnknownResponseError()
        elif error is not None:
            self.error = error
        elif 200 <= status_code < 300:
            self.error = None
        else:
            self.error = HTTPStatusError(status_code)

    @property
    def is_success(self) -> bool:
        return self.error is None

    @property
    def status(self) -> int:
        return self.status_code or 0

    @property
    def headers(self) -> dict[str, str]:
        # Last-write wins while keeping access case-insensitive for callers.
        out: dict[str, str] = {}
        for name, value in self.raw_headers:
            out[name.lower()] = value
        return out

    @property
    def data(self) -> bytes | None:
        if self._body is None or not self._auto_decompress:
            return self._body
        return decode_body(self._body, self.headers.get("content-encoding"))

    @property
    def content(self) -> bytes:
        return self.data or b""

    @property
    def body_string(self) -> str:
        data = self.data
        if data is None:
            logger.warning("No data found on response: %s", self)
            return ""
        try:
            return data.decode("utf-8")
        except UnicodeDecodeError:
            logger.warning("Data is not UTF-8: %d bytes", len(data))
            return ""

    @property
    def text(self) -> str:
        return self.body_string

    def json(self) -> object:
        return json.loads(self.content)

    @property
    def dictionary_from_json(self) -> dict[str, Any]:
        data = self.data
        if data is None:
            logger.warning("No data found on response: %s", self)
            return {}
        try:
            parsed = json.loads(data)
        except ValueError as exc:
            logger.error("Failed to parse JSON %r: %s", data[:200], exc)
            return {}
        if not isinstance(parsed, dict):
            logger.error("Failed to parse JSON as dictionary: %r", parsed)
            return {}
        return parsed

    def raise_for_status(self) -> None:
        if self.status_code is None:
            raise InvalidResponseError() from self.error
        if self.error is not None:
            raise HTTPError(self.status_code, self.content, self.url) from self.error

    def __repr__(self) -> str:
        size = len(self._body) if self._body is not None else 0
        state = "success" if self.is_success else "failure"
        return f"<HTTPResponse.{state} [{self.status}] {size} bytes>"
