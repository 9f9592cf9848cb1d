from __future__ import annotations

import binascii
import logging
import os
import re
from collections.abc import Iterable
from collections.abc import Iterator
from collections.abc import Mapping
from collections.abc import Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING

from paperclip import exceptions
from paperclip.net.http import headers
from paperclip.utils.strutils import escape_disposition_param

if TYPE_CHECKING:  # pragma: no cover
    from paperclip.image import EncodedImage

logger = logging.getLogger(__name__)

CRLF = b"\r\n"

# https://datatracker.ietf.org/doc/html/rfc2046#section-5.1.1
# boundary := 0*69<bchars> bcharsnospace
_valid_boundary = re.compile(rb"^[0-9A-Za-z'()+_,\-./:=? ]{0,69}[0-9A-Za-z'()+_,\-./:=?]$")
# Characters that force the boundary parameter to be quoted in the header.
_tspecials = re.compile(r"[()<>@,;:\\\"/\[\]?= ]")

_name_re = re.compile(rb'\bname="([^"]*)"')
_filename_re = re.compile(rb'\bfilename="([^"]*)"')


@dataclass(frozen=True)
class FilePart:
    """A form field carrying a file upload."""

    name: str
    filename: str
    content_type: str
    content: bytes


@dataclass(frozen=True)
class TextPart:
    """A plain form field. The value is transmitted as UTF-8."""

    name: str
    value: str


Part = FilePart | TextPart


def field_name(model_name: str, attribute_name: str) -> str:
    """
    Name a form control the way nested-attribute forms do, e.g. `user[avatar]`.

    Raises:
        InvalidArgumentError, if either name is empty or not a str.
    """
    if not isinstance(model_name, str) or not model_name:
        raise exceptions.InvalidArgumentError(
            f"Model name must be a non-empty string, not {model_name!r}."
        )
    if not isinstance(attribute_name, str) or not attribute_name:
        raise exceptions.InvalidArgumentError(
            f"Attribute name must be a non-empty string, not {attribute_name!r}."
        )
    return f"{model_name}[{attribute_name}]"


def make_boundary() -> str:
    """
    Generate a random boundary.

    See <https://datatracker.ietf.org/doc/html/rfc2046#section-5.1.1> for specifications
    on generating the boundary.
    """
    return "-" * 20 + binascii.hexlify(os.urandom(16)).decode()


def multipart_content_type(boundary: str) -> str:
    """
    The Content-Type header value announcing a form-data body with the given boundary.
    """
    if _tspecials.search(boundary):
        boundary = f'"{boundary}"'
    return headers.assemble_content_type("multipart", "form-data", {"boundary": boundary})


def _boundary_from_content_type(content_type: str | None) -> bytes | None:
    if not content_type:
        return None
    ct = headers.parse_content_type(content_type)
    if ct is None or ct[0] != "multipart":
        return None
    try:
        boundary = ct[2]["boundary"].encode("ascii")
    except (KeyError, UnicodeError):
        return None
    if not _valid_boundary.match(boundary):
        return None
    return boundary


def _part_chunks(part: Part) -> Iterator[bytes]:
    for value in (part.name, getattr(part, "filename", "")):
        yield value.encode("utf-8")
    if isinstance(part, FilePart):
        yield part.content_type.encode("utf-8")
        yield part.content
    else:
        yield part.value.encode("utf-8")


def boundary_collides(boundary: str | bytes, parts: Iterable[Part]) -> bool:
    """
    Check if the boundary occurs anywhere within the given parts.
    """
    if isinstance(boundary, str):
        boundary = boundary.encode("ascii")
    return any(boundary in chunk for part in parts for chunk in _part_chunks(part))


def _encode_part(boundary: bytes, part: Part) -> bytes:
    name = escape_disposition_param(part.name).encode("utf-8")
    hdrs = [b"--%b" % boundary]
    if isinstance(part, FilePart):
        filename = escape_disposition_param(part.filename).encode("utf-8")
        hdrs.append(
            b'Content-Disposition: form-data; name="%b"; filename="%b"' % (name, filename)
        )
        hdrs.append(b"Content-Type: %b" % part.content_type.encode("utf-8"))
        payload = part.content
    else:
        hdrs.append(b'Content-Disposition: form-data; name="%b"' % name)
        payload = part.value.encode("utf-8")
    return CRLF.join(hdrs) + CRLF + CRLF + payload + CRLF


def encode_multipart(
    content_type: str, parts: Sequence[Part], check_collision: bool = True
) -> bytes:
    """
    Encode parts as a multipart/form-data body, delimited by the boundary of
    the given Content-Type header value.

    Raises:
        InvalidArgumentError, if the content type carries no valid boundary.
        BoundaryCollisionError, if check_collision is set and the boundary
        occurs within the parts.
    """
    boundary = _boundary_from_content_type(content_type)
    if boundary is None:
        raise exceptions.InvalidArgumentError(
            f"No valid multipart boundary in content type: {content_type!r}"
        )
    if check_collision and boundary_collides(boundary, parts):
        raise exceptions.BoundaryCollisionError("boundary found in encoded content")

    chunks = [_encode_part(boundary, part) for part in parts]
    chunks.append(b"--%b--\r\n" % boundary)
    return b"".join(chunks)


def _attribute_pairs(
    attributes: Mapping[str, str] | Iterable[tuple[str, str]] | None,
) -> list[tuple[str, str]]:
    if attributes is None:
        return []
    if isinstance(attributes, Mapping):
        pairs = list(attributes.items())
    elif isinstance(attributes, (str, bytes)):
        raise exceptions.InvalidArgumentError(
            "Other attributes must be a mapping or a sequence of (key, value) pairs."
        )
    else:
        try:
            pairs = [(k, v) for k, v in attributes]
        except (TypeError, ValueError) as e:
            raise exceptions.InvalidArgumentError(
                "Other attributes must be a mapping or a sequence of (key, value) pairs."
            ) from e
    for key, value in pairs:
        if not isinstance(key, str) or not key:
            raise exceptions.InvalidArgumentError(
                f"Attribute keys must be non-empty strings, not {key!r}."
            )
        if not isinstance(value, str):
            raise exceptions.InvalidArgumentError(
                f"Value of attribute {key!r} must be a string, not {type(value).__name__}."
            )
    return pairs


def build(
    encoded_image: EncodedImage,
    attribute_name: str,
    model_name: str,
    other_attributes: Mapping[str, str] | Iterable[tuple[str, str]] | None = None,
    boundary: str | None = None,
    check_collision: bool = True,
    max_attempts: int = 16,
) -> tuple[bytes, str]:
    """
    Assemble the form-data body uploading an encoded image as `model[attribute]`,
    followed by one `model[key]` field per other attribute, in iteration order.

    If no boundary is given, a random one is generated. With check_collision
    enabled, generated boundaries that occur within the content are discarded
    and regenerated, up to max_attempts times.

    Returns:
        A (body, content_type) tuple, where content_type is the matching
        `multipart/form-data; boundary=...` header value.

    Raises:
        InvalidArgumentError, if a name is empty or the image has no content.
        BoundaryCollisionError, if no boundary free of collisions is available.
    """
    name = field_name(model_name, attribute_name)
    if encoded_image is None or not encoded_image.content:
        raise exceptions.InvalidArgumentError("Encoded image must have content.")

    parts: list[Part] = [
        FilePart(
            name=name,
            filename=f"{name}.{encoded_image.extension}",
            content_type=encoded_image.mime_type,
            content=encoded_image.content,
        )
    ]
    for key, value in _attribute_pairs(other_attributes):
        parts.append(TextPart(name=field_name(model_name, key), value=value))

    if boundary is None:
        if max_attempts < 1:
            raise exceptions.InvalidArgumentError(
                f"max_attempts must be at least 1, not {max_attempts}."
            )
        for _ in range(max_attempts):
            boundary = make_boundary()
            if not check_collision or not boundary_collides(boundary, parts):
                break
            logger.debug(
                f"Boundary {boundary} occurs within the form content, generating a new one."
            )
        else:
            raise exceptions.BoundaryCollisionError(
                f"No collision-free boundary found after {max_attempts} attempts."
            )

    content_type = multipart_content_type(boundary)
    return encode_multipart(content_type, parts, check_collision), content_type


def _iter_raw_parts(
    content_type: str | None, content: bytes | None
) -> Iterator[tuple[dict[bytes, bytes], bytes]]:
    boundary = _boundary_from_content_type(content_type)
    if boundary is None or not content:
        return
    delimiter = b"--" + boundary
    segments = content.split(CRLF + delimiter)
    if segments[0].startswith(delimiter):
        segments[0] = segments[0][len(delimiter) :]
    else:
        # preamble
        segments = segments[1:]

    for segment in segments:
        if segment.startswith(b"--"):
            break
        # Transport padding may precede the line break after a delimiter.
        segment = segment.lstrip(b" \t")
        if not segment.startswith(CRLF):
            continue
        segment = segment[2:]
        if segment.startswith(CRLF):
            head, body = b"", segment[2:]
        else:
            head, sep, body = segment.partition(CRLF + CRLF)
            if not sep:
                continue
        hdrs: dict[bytes, bytes] = {}
        for line in head.split(CRLF):
            key, sep, value = line.partition(b":")
            if sep:
                hdrs[key.strip().lower()] = value.strip()
        yield hdrs, body


def decode_multipart_parts(content_type: str | None, content: bytes | None) -> list[Part]:
    """
    Takes a multipart/form-data body and returns its parts.

    Parts with a filename become FileParts, all others TextParts. Parts without
    a name are skipped. Payloads are returned byte-for-byte.
    """
    r: list[Part] = []
    for hdrs, body in _iter_raw_parts(content_type, content):
        disposition = hdrs.get(b"content-disposition", b"")
        name_match = _name_re.search(disposition)
        if not name_match:
            continue
        name = name_match.group(1).decode("utf-8", "surrogateescape")
        filename_match = _filename_re.search(disposition)
        if filename_match:
            r.append(
                FilePart(
                    name=name,
                    filename=filename_match.group(1).decode("utf-8", "surrogateescape"),
                    content_type=hdrs.get(
                        b"content-type", b"application/octet-stream"
                    ).decode("utf-8", "surrogateescape"),
                    content=body,
                )
            )
        else:
            r.append(TextPart(name=name, value=body.decode("utf-8", "surrogateescape")))
    return r


def decode_multipart(
    content_type: str | None, content: bytes | None
) -> list[tuple[bytes, bytes]]:
    """
    Takes a multipart boundary encoded string and returns list of (key, value) tuples.
    """
    r = []
    for hdrs, body in _iter_raw_parts(content_type, content):
        match = _name_re.search(hdrs.get(b"content-disposition", b""))
        if match:
            r.append((match.group(1), body))
    return r
