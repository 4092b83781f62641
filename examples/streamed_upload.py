"""
Example: stream large files into a multipart body on disk, then upload it.

Any transport works; this one uses urllib so the example has no extra deps.
"""

import mimetypes
import urllib.request

import click
from formwire import HTTPRequest, MultipartFormEncoder, Part, RequestBuilder


@click.command()
@click.argument("url")
@click.argument("paths", nargs=-1, required=True, type=click.Path(exists=True, dir_okay=False))
@click.option("--field", default="file", help="Form field name for each file.")
@click.option("--dry-run", is_flag=True, help="Encode only, do not upload.")
def main(url: str, paths: tuple[str, ...], field: str, dry_run: bool) -> None:
    parts = [Part.text("formwire example", name="description")]
    for path in paths:
        mime_type = mimetypes.guess_type(path)[0] or "application/octet-stream"
        parts.append(Part.file(path, name=field, mime_type=mime_type))

    builder = RequestBuilder(encoder=MultipartFormEncoder(), stream_multipart=True)
    prepared = builder.build(HTTPRequest.post_multipart(url, parts))
    with prepared.body_file as body:
        click.secho(f"Encoded {body.content_length} bytes to {body.path}", fg="green")
        if dry_run:
            return
        with body.open() as stream:
            req = urllib.request.Request(
                prepared.url,
                data=stream,
                headers=dict(prepared.headers),
                method=str(prepared.method),
            )
            with urllib.request.urlopen(req) as resp:
                click.secho(f"Upload status: {resp.status}", fg="green")


if __name__ == "__main__":
    main()
