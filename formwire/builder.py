from __future__ import annotations

import json
import logging
import mimetypes
import os
from dataclasses import dataclass, field

from .errors import InvalidFormDataError
from .form import encode_form
from .headers import get_header, sanitize_headers, set_header
from .models import (
    FileData,
    FormParameters,
    HTTPMethod,
    HTTPRequest,
    JSONParameters,
    MultipartBody,
    RawData,
)
from .multipart import BodyFile, MultipartFormEncoder
from .utils import append_query, parse_url

logger = logging.getLogger(__name__)


@dataclass
class PreparedRequest:
    """
    Everything a transport needs to send a request.

    At most one of `body` and `body_file` is set. `body_file` is either a
    BodyFile from streamed multipart encoding, which the caller must clean up
    once the upload finishes, or the path of a file sent as-is.
    """

    method: HTTPMethod
    url: str
    headers: list[tuple[str, str]] = field(default_factory=list)
    body: bytes | None = None
    body_file: BodyFile | str | None = None

    @property
    def body_path(self) -> str | None:
        if isinstance(self.body_file, BodyFile):
            return self.body_file.path
        return self.body_file

    def header(self, name: str) -> str | None:
        return get_header(self.headers, name)


class RequestBuilder:
    """
    Convert HTTPRequest objects into PreparedRequests.

    Args:
        encoder: Multipart encoder to use (default: a new one per request)
        stream_multipart: Encode multipart bodies to a temporary file instead
            of memory (default: False)
    """

    def __init__(
        self,
        encoder: MultipartFormEncoder | None = None,
        stream_multipart: bool = False,
    ) -> None:
        self.encoder = encoder
        self.stream_multipart = stream_multipart

    def build(self, request: HTTPRequest) -> PreparedRequest:
        """
        Raises:
            InvalidFormDataError: Form parameters could not be encoded.
            MultipartError: Multipart encoding failed.
            ValueError: The URL is not an http(s) URL.
        """
        parse_url(request.url)
        prepared = PreparedRequest(
            method=request.method,
            url=request.url,
            headers=sanitize_headers(request.headers),
        )
        body = request.body
        if body is None:
            pass
        elif request.has_query_parameters:
            try:
                prepared.url = append_query(request.url, body.parameters)
            except UnicodeDecodeError as exc:
                raise InvalidFormDataError(f"Cannot encode query parameters for {request}") from exc
        elif isinstance(body, FormParameters):
            self._encode_form(prepared, request, body)
        elif isinstance(body, JSONParameters):
            set_header(prepared.headers, "Content-Type", "application/json")
            prepared.body = json.dumps(dict(body.parameters)).encode("utf-8")
        elif isinstance(body, RawData):
            set_header(prepared.headers, "Content-Type", body.content_type)
            prepared.body = body.data
        elif isinstance(body, MultipartBody):
            self._encode_multipart(prepared, body)
        elif isinstance(body, FileData):
            self._attach_file(prepared, body)
        else:
            raise TypeError(f"Unsupported request body: {type(body).__name__}")
        return prepared

    def _encode_form(
        self, prepared: PreparedRequest, request: HTTPRequest, body: FormParameters
    ) -> None:
        try:
            form = encode_form(body.parameters)
        except UnicodeDecodeError as exc:
            raise InvalidFormDataError(f"Cannot encode form data for {request}") from exc
        set_header(prepared.headers, "Content-Type", "application/x-www-form-urlencoded")
        prepared.body = form.encode("utf-8")

    def _encode_multipart(self, prepared: PreparedRequest, body: MultipartBody) -> None:
        encoder = self.encoder or MultipartFormEncoder()
        if self.stream_multipart:
            encoded = encoder.encode_to_file(body.parts)
            prepared.body_file = encoded
        else:
            encoded = encoder.encode_to_memory(body.parts)
            prepared.body = encoded.data
        set_header(prepared.headers, "Content-Type", encoded.content_type)
        set_header(prepared.headers, "Content-Length", str(encoded.content_length))

    def _attach_file(self, prepared: PreparedRequest, body: FileData) -> None:
        prepared.body_file = body.path
        try:
            size = os.path.getsize(body.path)
        except OSError as exc:
            logger.debug("Cannot measure %s, sending without Content-Length: %s", body.path, exc)
        else:
            set_header(prepared.headers, "Content-Length", str(size))

        mime_type, _ = mimetypes.guess_type(body.path)
        if mime_type:
            set_header(prepared.headers, "Content-Type", mime_type)


def build_request(request: HTTPRequest, **kwargs) -> PreparedRequest:
    """Build `request` with a one-off RequestBuilder."""
    return RequestBuilder(**kwargs).build(request)
