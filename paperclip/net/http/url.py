import urllib.parse

from paperclip.exceptions import InvalidArgumentError


def parse(url: str) -> tuple[str, str, int, str]:
    """
    URL-parsing function that checks that
        - the scheme is http or https, in any case
        - a host is given
        - port is an integer 0-65535

    The URL itself is never modified. Requests keep the string they were given.

    Args:
        A URL string

    Returns:
        A (scheme, host, port, path) tuple. Scheme and host are lowercased,
        port is the scheme's default port if none is given, and path includes
        the query string.

    Raises:
        InvalidArgumentError, if the URL is not properly formatted.
    """
    if not isinstance(url, str):
        raise InvalidArgumentError(f"URL must be a string, not {type(url).__name__}.")

    if any(c.isspace() or ord(c) < 0x20 for c in url):
        raise InvalidArgumentError(f"URL contains whitespace or control characters: {url!r}")

    try:
        parsed = urllib.parse.urlsplit(url)
        port = parsed.port
    except ValueError as e:
        raise InvalidArgumentError(f"Invalid URL {url!r}: {e}") from e

    scheme = parsed.scheme.lower()
    if scheme not in ("http", "https"):
        raise InvalidArgumentError(f"Unsupported URL scheme: {parsed.scheme!r}")
    if not parsed.hostname:
        raise InvalidArgumentError(f"No hostname given: {url!r}")

    if port is None:
        port = default_port(scheme)

    path = parsed.path or "/"
    if parsed.query:
        path += "?" + parsed.query

    return scheme, parsed.hostname, port, path  # type: ignore


def default_port(scheme: str) -> int | None:
    return {
        "http": 80,
        "https": 443,
    }.get(scheme.lower(), None)
