"""Pytest configuration and fixtures."""

import pytest
from formwire.models import HTTPResponse
from formwire.multipart import MultipartFormEncoder

BOUNDARY = "SuperAwesomeBoundary"

LOREM = (
    "Lorem ipsum dolor sit amet, consectetur adipiscing elit, sed do eiusmod\n"
    "tempor incididunt ut labore et dolore magna aliqua. Ut enim ad minim veniam,\n"
    "quis nostrud exercitation ullamco laboris nisi ut aliquip ex ea commodo\n"
    "consequat.\n"
)


@pytest.fixture
def encoder(tmp_path):
    """Encoder with a fixed boundary that writes into the test's tmp dir."""
    return MultipartFormEncoder(boundary=BOUNDARY, temp_dir=str(tmp_path))


@pytest.fixture
def lorem_file(tmp_path):
    """A small text file on disk."""
    path = tmp_path / "lorem.txt"
    path.write_text(LOREM, encoding="utf-8")
    return path


@pytest.fixture
def sample_response():
    """Create a sample successful HTTPResponse."""
    return HTTPResponse(
        status_code=200,
        headers=[
            ("Content-Type", "application/json"),
            ("Content-Length", "13"),
        ],
        body=b'{"key":"val"}',
        reason="OK",
        url="https://api.example.net/things",
    )
