"""
Example: encoding is blocking, so run it in a worker thread from async code.
"""

import asyncio
import os
import tempfile

import click
from formwire import MultipartFormEncoder, Part


async def main() -> None:
    with tempfile.NamedTemporaryFile(suffix=".bin", delete=False) as f:
        f.write(os.urandom(4 * 1024 * 1024))
    try:
        parts = [
            Part.text("42", name="id"),
            Part.file(f.name, name="blob", mime_type="application/octet-stream"),
        ]
        encoder = MultipartFormEncoder()
        in_memory, on_disk = await asyncio.gather(
            asyncio.to_thread(encoder.encode_to_memory, parts),
            asyncio.to_thread(encoder.encode_to_file, parts),
        )
        with on_disk:
            click.secho(f"memory: {in_memory.content_length} bytes", fg="green")
            click.secho(f"file:   {on_disk.content_length} bytes at {on_disk.path}", fg="green")
    finally:
        os.remove(f.name)


if __name__ == "__main__":
    asyncio.run(main())
