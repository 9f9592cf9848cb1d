from typing import overload


@overload
def always_bytes(str_or_bytes: None, *encode_args) -> None: ...


@overload
def always_bytes(str_or_bytes: str | bytes, *encode_args) -> bytes: ...


def always_bytes(str_or_bytes: None | str | bytes, *encode_args) -> None | bytes:
    if str_or_bytes is None or isinstance(str_or_bytes, bytes):
        return str_or_bytes
    elif isinstance(str_or_bytes, str):
        return str_or_bytes.encode(*encode_args)
    else:
        raise TypeError(
            f"Expected str or bytes, but got {type(str_or_bytes).__name__}."
        )


# https://html.spec.whatwg.org/multipage/form-control-infrastructure.html#multipart-form-data
# Quotes and line breaks in field names and filenames are percent-encoded by browsers.
_disposition_trans = str.maketrans(
    {
        "\n": "%0A",
        "\r": "%0D",
        '"': "%22",
    }
)


def escape_disposition_param(value: str) -> str:
    """
    Escape a name or filename so that it can be placed inside the double quotes
    of a Content-Disposition header parameter.

    Names without quotes or line breaks are returned unmodified.
    """
    if not isinstance(value, str):
        raise ValueError(f"value type must be str but is {type(value).__name__}")
    return value.translate(_disposition_trans)
