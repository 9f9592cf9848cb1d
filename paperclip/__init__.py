from paperclip.exceptions import BoundaryCollisionError
from paperclip.exceptions import EncodingError
from paperclip.exceptions import InvalidArgumentError
from paperclip.exceptions import PaperclipException
from paperclip.http import Request
from paperclip.image import ImageType
from paperclip.options import Options
from paperclip.uploader import build_upload_request
from paperclip.uploader import upload_request_for_image

__all__ = [
    "BoundaryCollisionError",
    "EncodingError",
    "ImageType",
    "InvalidArgumentError",
    "Options",
    "PaperclipException",
    "Request",
    "build_upload_request",
    "upload_request_for_image",
]
