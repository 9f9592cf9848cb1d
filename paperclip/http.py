from collections.abc import Iterable
from collections.abc import Iterator
from dataclasses import dataclass
from dataclasses import fields

from paperclip.coretypes import multidict
from paperclip.net.http import multipart
from paperclip.net.http import url as url_
from paperclip.utils import strutils
from paperclip.utils import typecheck


# While headers _should_ be ASCII, it's not uncommon for certain headers to be utf-8 encoded.
def _native(x: bytes) -> str:
    return x.decode("utf-8", "surrogateescape")


def _always_bytes(x: str | bytes) -> bytes:
    return strutils.always_bytes(x, "utf-8", "surrogateescape")


# This cannot be easily typed with mypy yet, so we just specify MultiDict without concrete types.
class Headers(multidict.MultiDict):  # type: ignore
    """
    Case-insensitive HTTP headers with a full dictionary interface.

    >>> h = Headers(content_type="multipart/form-data; boundary=xyz")
    >>> h["Content-Type"]
    "multipart/form-data; boundary=xyz"

    Repeated headers are folded into a single value as per RFC 7230.
    The raw `(name, value)` byte tuples are kept in `h.fields`.
    """

    def __init__(self, fields: Iterable[tuple[bytes, bytes]] = (), **headers):
        """
        *Args:*
         - *fields:* (optional) list of ``(name, value)`` header byte tuples,
           e.g. ``[(b"Content-Type", b"image/png")]``. All names and values must be bytes.
         - *\\*\\*headers:* Additional headers to set. Will overwrite existing values from `fields`.
           For convenience, underscores in header names will be transformed to dashes.
        """
        super().__init__(fields)

        for key, value in self.fields:
            if not isinstance(key, bytes) or not isinstance(value, bytes):
                raise TypeError("Header fields must be bytes.")

        # content_type -> content-type
        self.update(
            {
                _always_bytes(name).replace(b"_", b"-"): _always_bytes(value)
                for name, value in headers.items()
            }
        )

    fields: tuple[tuple[bytes, bytes], ...]

    @staticmethod
    def _reduce_values(values) -> str:
        # Headers can be folded
        return ", ".join(values)

    @staticmethod
    def _kconv(key) -> str:
        # Headers are case-insensitive
        return key.lower()

    def __delitem__(self, key: str | bytes) -> None:
        key = _always_bytes(key)
        super().__delitem__(key)

    def __iter__(self) -> Iterator[str]:
        for x in super().__iter__():
            yield _native(x)

    def get_all(self, name: str | bytes) -> list[str]:
        """
        Like `Headers.get`, but does not fold multiple headers into a single one.
        """
        name = _always_bytes(name)
        return [_native(x) for x in super().get_all(name)]

    def set_all(self, name: str | bytes, values: Iterable[str | bytes]):
        name = _always_bytes(name)
        values = [_always_bytes(x) for x in values]
        return super().set_all(name, values)


@dataclass
class RequestData:
    method: bytes
    url: str
    headers: Headers
    content: bytes

    # noinspection PyUnreachableCode
    if __debug__:

        def __post_init__(self):
            for field in fields(self):
                val = getattr(self, field.name)
                typecheck.check_option_type(field.name, val, field.type)


class Request:
    """
    An HTTP request, ready to be handed to an HTTP client.

    The URL is kept exactly as it was given. `scheme`, `host`, `port` and
    `path` are read-only views parsed from it.
    """

    data: RequestData

    def __init__(
        self,
        method: str | bytes,
        url: str,
        headers: Headers | Iterable[tuple[bytes, bytes]],
        content: bytes,
    ):
        if isinstance(method, str):
            method = method.encode("ascii", "strict")
        if not isinstance(content, bytes):
            raise TypeError(f"Content must be bytes, not {type(content).__name__}.")
        if not isinstance(headers, Headers):
            headers = Headers(headers)
        url_.parse(url)

        self.data = RequestData(
            method=method,
            url=url,
            headers=headers,
            content=content,
        )

    def __repr__(self) -> str:
        return f"Request({self.method} {self.url})"

    @classmethod
    def make(
        cls,
        method: str,
        url: str,
        content: bytes = b"",
        headers: (
            Headers | dict[str | bytes, str | bytes] | Iterable[tuple[bytes, bytes]]
        ) = (),
    ) -> "Request":
        """
        Simplified API for creating request objects.

        A `content-length` header matching the content is added.

        Raises:
            InvalidArgumentError (a ValueError), if the URL is malformed.
        """
        # Headers can be list or dict, we differentiate here.
        if isinstance(headers, Headers):
            pass
        elif isinstance(headers, dict):
            headers = Headers(
                (_always_bytes(k), _always_bytes(v)) for k, v in headers.items()
            )
        elif isinstance(headers, Iterable):
            headers = Headers(headers)  # type: ignore
        else:
            raise TypeError(
                "Expected headers to be an iterable or dict, but is {}.".format(
                    type(headers).__name__
                )
            )

        req = cls(method, url, headers, b"")
        # Assign this manually to update the content-length header.
        req.content = content
        return req

    @property
    def method(self) -> str:
        """
        HTTP request method, e.g. "POST".
        """
        return self.data.method.decode("utf-8", "surrogateescape").upper()

    @method.setter
    def method(self, val: str | bytes) -> None:
        self.data.method = _always_bytes(val)

    @property
    def url(self) -> str:
        """
        The target URL, exactly as supplied.

        Assigning a new URL validates it first.
        """
        return self.data.url

    @url.setter
    def url(self, val: str) -> None:
        url_.parse(val)
        self.data.url = val

    @property
    def scheme(self) -> str:
        """
        Lowercase URL scheme, "http" or "https".
        """
        return url_.parse(self.url)[0]

    @property
    def host(self) -> str:
        """
        Lowercase target host, without port or userinfo.
        """
        return url_.parse(self.url)[1]

    @property
    def port(self) -> int:
        """
        Target port. The scheme's default port if the URL names none.
        """
        return url_.parse(self.url)[2]

    @property
    def path(self) -> str:
        """
        HTTP request path including the query, e.g. "/users/1?a=b".
        """
        return url_.parse(self.url)[3]

    @property
    def headers(self) -> Headers:
        """
        The HTTP headers.
        """
        return self.data.headers

    @property
    def content(self) -> bytes:
        """
        The HTTP message body as bytes.

        Setting the content updates the `content-length` header.
        """
        return self.data.content

    @content.setter
    def content(self, value: bytes) -> None:
        if not isinstance(value, bytes):
            raise TypeError(
                f"Message content must be bytes, not {type(value).__name__}."
            )
        self.data.content = value
        self.headers["content-length"] = str(len(value))

    body = content

    @property
    def multipart_form(self) -> multidict.MultiDict:
        """
        The multipart form data as a MultiDict of (name, value) byte tuples.

        If the content-type indicates non-form data or the form could not be parsed,
        this is an empty MultiDict.
        """
        ct = self.headers.get("content-type", "")
        if ct.lower().startswith("multipart/form-data") and self.content:
            return multidict.MultiDict(multipart.decode_multipart(ct, self.content))
        return multidict.MultiDict()

    @property
    def multipart_parts(self) -> list[multipart.Part]:
        """
        The multipart form parts, including filenames and content types of file uploads.
        """
        return multipart.decode_multipart_parts(
            self.headers.get("content-type", ""), self.content
        )
