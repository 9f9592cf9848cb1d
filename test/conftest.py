from __future__ import annotations

import pytest
from requests_toolbelt.multipart.decoder import MultipartDecoder

from paperclip.test import tutils


@pytest.fixture
def red_pixel():
    return tutils.timage()


@pytest.fixture
def parse_form():
    """
    Parse a multipart body with an independent decoder.

    Returns a list of (headers, content) tuples, with header names and values as str.
    """

    def parse(content: bytes, content_type: str) -> list[tuple[dict[str, str], bytes]]:
        decoder = MultipartDecoder(content, content_type)
        return [
            (
                {k.decode().lower(): v.decode() for k, v in part.headers.items()},
                part.content,
            )
            for part in decoder.parts
        ]

    return parse
