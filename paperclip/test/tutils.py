from PIL import Image

from paperclip import http
from paperclip import image


def treq(**kwargs) -> http.Request:
    """
    Returns:
        paperclip.http.Request
    """
    default = dict(
        method=b"POST",
        url="http://address:22/path",
        headers=http.Headers(((b"header", b"qvalue"), (b"content-length", b"7"))),
        content=b"content",
    )
    default.update(kwargs)
    return http.Request(**default)  # type: ignore


def timage(mode: str = "RGB", size=(1, 1), color=(255, 0, 0)) -> Image.Image:
    """
    Returns:
        A PIL image filled with a single color, a red pixel by default.
    """
    return Image.new(mode, size, color)


def tencoded(**kwargs) -> image.EncodedImage:
    """
    Returns:
        paperclip.image.EncodedImage with placeholder JPEG content.
    """
    default = dict(
        content=b"\xff\xd8\xff\xe0 not really a jpeg \r\n\r\n\x00\xff\xd9",
        mime_type="image/jpeg",
        extension="jpg",
    )
    default.update(kwargs)
    return image.EncodedImage(**default)  # type: ignore
