"""Tests for formwire.builder module."""

import json
import logging
import os

import pytest
from formwire.builder import PreparedRequest, RequestBuilder, build_request
from formwire.errors import InvalidFormDataError, TooMuchDataForMemoryError
from formwire.models import HTTPMethod, HTTPRequest
from formwire.multipart import BodyFile, MultipartFormEncoder, Part

from conftest import BOUNDARY

URL = "https://api.example.net/things"


class TestQueryParameters:
    """Tests for GET/DELETE parameter handling."""

    def test_get_parameters_in_query(self):
        """Test GET parameters are appended to the URL."""
        prepared = build_request(HTTPRequest.get(URL, {"q": "a b", "page": 2}))
        assert prepared.url == f"{URL}?page=2&q=a%20b"
        assert prepared.body is None
        assert prepared.header("Content-Type") is None

    def test_existing_query_preserved(self):
        """Test parameters go after an existing query string."""
        prepared = build_request(HTTPRequest.delete(f"{URL}?force=1", {"id": 7}))
        assert prepared.method is HTTPMethod.DELETE
        assert prepared.url == f"{URL}?force=1&id=7"

    def test_query_invalid_bytes(self):
        """Test undecodable query values raise InvalidFormDataError."""
        with pytest.raises(InvalidFormDataError, match="query parameters"):
            build_request(HTTPRequest.get(URL, {"blob": b"\xff"}))

    def test_get_without_parameters(self):
        """Test a plain GET passes through untouched."""
        prepared = build_request(HTTPRequest.get(URL))
        assert prepared.url == URL
        assert prepared.headers == []
        assert prepared.body is None
        assert prepared.body_file is None


class TestBodies:
    """Tests for body encoding per request body kind."""

    def test_form_body(self):
        """Test form parameters become a URL-encoded body."""
        prepared = build_request(HTTPRequest.post_form(URL, {"name": "John", "email": "john@example.net"}))
        assert prepared.header("Content-Type") == "application/x-www-form-urlencoded"
        assert prepared.body == b"email=john%40example.net&name=John"

    def test_form_body_invalid_bytes(self):
        """Test undecodable form values raise InvalidFormDataError."""
        with pytest.raises(InvalidFormDataError):
            build_request(HTTPRequest.post_form(URL, {"blob": b"\xff"}))

    def test_json_body(self):
        """Test JSON parameters are serialized."""
        prepared = build_request(HTTPRequest.put_json(URL, {"a": [1, 2], "b": None}))
        assert prepared.header("content-type") == "application/json"
        assert json.loads(prepared.body) == {"a": [1, 2], "b": None}

    def test_raw_data_body(self):
        """Test raw data is sent as-is with its MIME type."""
        prepared = build_request(HTTPRequest.patch_data(URL, b"<x/>", "application/xml"))
        assert prepared.body == b"<x/>"
        assert prepared.header("Content-Type") == "application/xml"

    def test_no_body(self):
        """Test bodyless POST sets nothing."""
        prepared = build_request(HTTPRequest.post(URL))
        assert prepared.body is None
        assert prepared.headers == []


class TestMultipart:
    """Tests for multipart bodies."""

    def test_multipart_in_memory(self):
        """Test multipart bodies are encoded in memory by default."""
        encoder = MultipartFormEncoder(boundary=BOUNDARY)
        request = HTTPRequest.post_multipart(URL, [Part.text("Tina", name="name")])
        prepared = RequestBuilder(encoder=encoder).build(request)
        assert prepared.header("Content-Type") == f'multipart/form-data; boundary="{BOUNDARY}"'
        assert prepared.header("Content-Length") == str(len(prepared.body))
        assert prepared.body.endswith(b"--SuperAwesomeBoundary--")
        assert prepared.body_file is None

    def test_multipart_streamed(self, tmp_path, lorem_file):
        """Test stream_multipart hands back a BodyFile."""
        encoder = MultipartFormEncoder(boundary=BOUNDARY, temp_dir=str(tmp_path))
        request = HTTPRequest.put_multipart(URL, [Part.file(lorem_file, name="lorem", mime_type="text/plain")])
        prepared = RequestBuilder(encoder=encoder, stream_multipart=True).build(request)
        try:
            assert isinstance(prepared.body_file, BodyFile)
            assert prepared.body is None
            assert prepared.header("Content-Type") == f"multipart/form-data; boundary={BOUNDARY}"
            assert prepared.header("Content-Length") == str(os.path.getsize(prepared.body_path))
        finally:
            prepared.body_file.cleanup()

    def test_multipart_default_encoder(self):
        """Test a fresh encoder with a generated boundary is used by default."""
        prepared = build_request(HTTPRequest.post_multipart(URL, []))
        assert prepared.header("Content-Type").startswith('multipart/form-data; boundary="formwire-')

    def test_encoder_errors_propagate(self):
        """Test encoder errors reach the caller unchanged."""
        encoder = MultipartFormEncoder(memory_limit=3)
        request = HTTPRequest.post_multipart(URL, [Part.text("toolong", name="a")])
        with pytest.raises(TooMuchDataForMemoryError):
            RequestBuilder(encoder=encoder).build(request)


class TestFileData:
    """Tests for file bodies."""

    def test_file_body(self, tmp_path):
        """Test a file body gets length and a guessed content type."""
        path = tmp_path / "photo.png"
        path.write_bytes(b"\x89PNG" + b"\x00" * 96)
        prepared = build_request(HTTPRequest.post_file(URL, path))
        assert prepared.body_file == str(path)
        assert prepared.body_path == str(path)
        assert prepared.header("Content-Length") == "100"
        assert prepared.header("Content-Type") == "image/png"

    def test_missing_file_has_no_length(self, tmp_path):
        """Test an unmeasurable file is sent without Content-Length."""
        prepared = build_request(HTTPRequest.put_file(URL, tmp_path / "missing.zzz-unknown"))
        assert prepared.header("Content-Length") is None
        assert prepared.header("Content-Type") is None


class TestHeaders:
    """Tests for header handling."""

    def test_request_headers_copied(self):
        """Test caller headers are kept in order."""
        request = HTTPRequest.post(URL)
        request.headers = {"Accept": "application/json", "X-Trace": "abc"}
        prepared = build_request(request)
        assert prepared.headers == [("Accept", "application/json"), ("X-Trace", "abc")]

    def test_request_headers_sanitized(self):
        """Test CR/LF are stripped from caller headers."""
        request = HTTPRequest.post(URL)
        request.headers = {"X-Evil": "a\r\nInjected: 1"}
        prepared = build_request(request)
        assert prepared.headers == [("X-Evil", "aInjected: 1")]

    def test_override_logs_warning(self, caplog):
        """Test overriding a caller Content-Type logs a warning."""
        request = HTTPRequest.post_json(URL, {"a": 1})
        request.headers = {"content-type": "text/plain"}
        with caplog.at_level(logging.WARNING, logger="formwire.headers"):
            prepared = build_request(request)
        assert prepared.headers == [("Content-Type", "application/json")]
        assert "Overriding existing Content-Type" in caplog.text


class TestValidation:
    """Tests for URL validation."""

    def test_invalid_scheme(self):
        """Test non-http URLs are rejected."""
        with pytest.raises(ValueError, match="Only http and https"):
            build_request(HTTPRequest.get("ftp://example.com/file"))

    def test_prepared_request_defaults(self):
        """Test PreparedRequest defaults."""
        prepared = PreparedRequest(HTTPMethod.GET, URL)
        assert prepared.headers == []
        assert prepared.body_path is None
