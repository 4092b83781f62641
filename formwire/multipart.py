"""
multipart/form-data encoding.

Parts are encoded either into a single in-memory buffer or streamed into a
temporary file that the caller owns afterwards. File-backed parts are copied
in fixed-size chunks so large uploads never have to fit in memory.
"""

from __future__ import annotations

import io
import logging
import os
import stat
import tempfile
import time
import uuid
from collections.abc import Iterable
from dataclasses import dataclass
from typing import BinaryIO, Union

from .errors import (
    InvalidFileError,
    InvalidOutputFileError,
    MultipartError,
    StreamError,
    TooMuchDataForMemoryError,
)

logger = logging.getLogger(__name__)

DEFAULT_CHUNK_SIZE = 128 * 1024
DEFAULT_MEMORY_LIMIT = 50_000_000


@dataclass(frozen=True)
class TextContent:
    value: str

    @property
    def payload_size(self) -> int:
        return len(self.value.encode("utf-8"))


@dataclass(frozen=True)
class DataContent:
    data: bytes
    mime_type: str
    filename: str

    @property
    def payload_size(self) -> int:
        return len(self.data)


@dataclass(frozen=True)
class FileContent:
    path: str
    size: int
    mime_type: str
    filename: str

    @property
    def payload_size(self) -> int:
        return self.size


PartContent = Union[TextContent, DataContent, FileContent]


@dataclass(frozen=True)
class Part:
    """A single named field of a multipart form."""

    name: str
    content: PartContent

    @classmethod
    def text(cls, value: str, name: str) -> Part:
        return cls(name, TextContent(value))

    @classmethod
    def data(cls, data: bytes, name: str, mime_type: str, filename: str) -> Part:
        return cls(name, DataContent(bytes(data), mime_type, filename))

    @classmethod
    def file(
        cls,
        path: str | os.PathLike[str],
        name: str,
        mime_type: str,
        filename: str | None = None,
    ) -> Part:
        """
        Reference a file on disk. Its size is recorded now; if the file changes
        before encoding, the part's Content-Length will not match its payload.

        Raises:
            InvalidFileError: The path cannot be stat'd or is not a regular file.
        """
        path = os.fspath(path)
        try:
            st = os.stat(path)
        except OSError as exc:
            raise InvalidFileError(path) from exc
        if not stat.S_ISREG(st.st_mode):
            raise InvalidFileError(path, f"Not a regular file: {path}")
        if filename is None:
            filename = os.path.basename(path)
        return cls(name, FileContent(path, st.st_size, mime_type, filename))


@dataclass(frozen=True)
class BodyData:
    """Encoded body held in memory."""

    content_type: str
    data: bytes

    @property
    def content_length(self) -> int:
        return len(self.data)


@dataclass(frozen=True)
class BodyFile:
    """
    Encoded body written to a temporary file.

    The file belongs to the caller, who must delete it once the upload is done
    (call cleanup() or use the object as a context manager). Nothing removes it
    implicitly since a transport may still be reading from it.
    """

    content_type: str
    path: str
    content_length: int

    def open(self) -> BinaryIO:
        return open(self.path, "rb")

    def cleanup(self) -> None:
        try:
            os.remove(self.path)
        except FileNotFoundError:
            return
        logger.debug("Removed multipart body file %s", self.path)

    def __enter__(self) -> BodyFile:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.cleanup()


def write_all(sink: BinaryIO, data: bytes | memoryview) -> None:
    """
    Write every byte of `data` to `sink`, retrying short writes.
    Empty data is a no-op.
    """
    view = memoryview(data)
    while view:
        try:
            written = sink.write(view)
        except OSError as exc:
            raise StreamError(f"Write failed: {exc}") from exc
        if written is None:
            # Non-blocking raw sink that could not accept anything.
            raise StreamError("Write would block")
        if written <= 0:
            raise StreamError("Short write: sink accepted no bytes")
        view = view[written:]


def copy_stream(source: BinaryIO, sink: BinaryIO, chunk_size: int = DEFAULT_CHUNK_SIZE) -> int:
    """
    Copy `source` into `sink` through one reusable buffer of `chunk_size`
    bytes, so memory use does not grow with the size of the source.

    Returns:
        Number of bytes copied.
    """
    buf = bytearray(chunk_size)
    view = memoryview(buf)
    copied = 0
    while True:
        try:
            n = source.readinto(view)
        except OSError as exc:
            raise StreamError(f"Read failed: {exc}") from exc
        if not n:
            break
        write_all(sink, view[:n])
        copied += n
    return copied


class MultipartFormEncoder:
    """
    Encode an ordered list of Parts as a multipart/form-data body.

    Args:
        boundary: Delimiter between parts (default: "formwire-" + random hex).
            It is not checked against part content.
        chunk_size: Buffer size used when copying file parts (default: 128 KiB)
        memory_limit: Payload ceiling for encode_to_memory() (default: 50 MB)
        temp_dir: Directory for encode_to_file() output (default: system temp dir)
    """

    def __init__(
        self,
        boundary: str | None = None,
        *,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        memory_limit: int = DEFAULT_MEMORY_LIMIT,
        temp_dir: str | None = None,
    ) -> None:
        if chunk_size <= 0:
            raise ValueError("chunk_size must be positive")
        self.boundary = boundary or f"formwire-{uuid.uuid4().hex}"
        self.chunk_size = chunk_size
        self.memory_limit = memory_limit
        self.temp_dir = temp_dir

    def encode_to_memory(self, parts: Iterable[Part]) -> BodyData:
        """
        Encode parts into a bytes buffer.

        Only payload bytes count towards memory_limit; boundaries and part
        headers are not included, so the buffer can end up slightly larger.

        Raises:
            TooMuchDataForMemoryError: Payloads add up to memory_limit or more.
            InvalidFileError: A file part cannot be opened.
            StreamError: Reading a file part failed.
        """
        parts = list(parts)
        total = sum(part.content.payload_size for part in parts)
        if total >= self.memory_limit:
            raise TooMuchDataForMemoryError(total, self.memory_limit)

        logger.debug("Encoding %d parts (%d payload bytes) in memory", len(parts), total)
        with io.BytesIO() as sink:
            self._write_body(parts, sink)
            data = sink.getvalue()
        return BodyData(
            content_type=f'multipart/form-data; boundary="{self.boundary}"',
            data=data,
        )

    def encode_to_file(self, parts: Iterable[Part]) -> BodyFile:
        """
        Stream parts into a new temporary file.

        The returned BodyFile reports the measured size of that file, framing
        included. On failure the partial file is left in place; its path is on
        the raised error's `output_path`.

        Raises:
            InvalidOutputFileError: The output file cannot be created or measured.
            InvalidFileError: A file part cannot be opened.
            StreamError: A read or write failed mid-stream.
        """
        parts = list(parts)
        prefix = f"multipart-{int(time.time())}-"
        try:
            fd, output_path = tempfile.mkstemp(prefix=prefix, dir=self.temp_dir)
        except OSError as exc:
            target = os.path.join(self.temp_dir or tempfile.gettempdir(), prefix)
            raise InvalidOutputFileError(target) from exc
        logger.debug("Encoding %d parts to %s", len(parts), output_path)

        try:
            with os.fdopen(fd, "wb") as sink:
                self._write_body(parts, sink)
        except MultipartError as exc:
            exc.output_path = output_path
            raise
        except OSError as exc:
            # Flush or close failure while finishing the file.
            raise StreamError(f"Write failed: {exc}", output_path=output_path) from exc

        try:
            size = os.path.getsize(output_path)
        except OSError as exc:
            raise InvalidOutputFileError(output_path) from exc
        logger.debug("Wrote %d byte multipart body to %s", size, output_path)
        return BodyFile(
            content_type=f"multipart/form-data; boundary={self.boundary}",
            path=output_path,
            content_length=size,
        )

    def _write_body(self, parts: list[Part], sink: BinaryIO) -> None:
        for part in parts:
            self._write_part(part, sink)
        write_all(sink, f"--{self.boundary}--".encode())

    def _write_part(self, part: Part, sink: BinaryIO) -> None:
        write_all(sink, self._part_header(part))
        content = part.content
        if isinstance(content, TextContent):
            write_all(sink, content.value.encode("utf-8"))
        elif isinstance(content, DataContent):
            write_all(sink, content.data)
        elif isinstance(content, FileContent):
            self._copy_file(content.path, sink)
        else:
            raise TypeError(f"Unsupported part content: {type(content).__name__}")
        write_all(sink, b"\r\n")

    def _part_header(self, part: Part) -> bytes:
        content = part.content
        lines = [f"--{self.boundary}"]
        if isinstance(content, TextContent):
            lines.append(f'Content-Disposition: form-data; name="{part.name}"')
        else:
            lines.append(
                f'Content-Disposition: form-data; name="{part.name}"; '
                f'filename="{content.filename}"'
            )
            lines.append(f"Content-Type: {content.mime_type}")
            lines.append(f"Content-Length: {content.payload_size}")
        return ("\r\n".join(lines) + "\r\n\r\n").encode("utf-8")

    def _copy_file(self, path: str, sink: BinaryIO) -> None:
        try:
            source = open(path, "rb")
        except OSError as exc:
            raise InvalidFileError(path) from exc
        with source:
            copy_stream(source, sink, self.chunk_size)
