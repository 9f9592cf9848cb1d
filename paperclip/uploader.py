"""
Create the request that uploads an image to a model attachment, the way a
browser submits a nested-attribute form such as

    <form enctype="multipart/form-data">
      <input type="file" name="user[avatar]">
      <input type="text" name="user[name]">
    </form>

The request is only built, never sent. Pass it on to the HTTP client of your choice:

    request = upload_request_for_image(img, "jpeg", 0.8, "avatar", "user", {"name": "Joel"}, url)
    if request is not None:
        requests.request(request.method, request.url, data=request.body, headers=dict(request.headers))
"""
import logging
from collections.abc import Iterable
from collections.abc import Mapping
from typing import Any

from paperclip import exceptions
from paperclip import image as image_
from paperclip.http import Request
from paperclip.net.http import multipart
from paperclip.options import Options

logger = logging.getLogger(__name__)


def build_upload_request(
    image: Any,
    image_type: image_.ImageType | str,
    quality: float | None,
    attribute_name: str,
    model_name: str,
    other_attributes: Mapping[str, str] | Iterable[tuple[str, str]] | None,
    url: str,
    *,
    options: Options | None = None,
    encoder: image_.ImageEncoder | None = None,
) -> Request:
    """
    Build a request uploading image as the `model_name[attribute_name]` file field.

    Other attributes are submitted as `model_name[key]` text fields, in iteration order.

    Raises:
        InvalidArgumentError, if a name is empty or the URL is malformed.
        EncodingError, if the image cannot be encoded.
        BoundaryCollisionError, if no usable boundary could be generated.
    """
    if options is None:
        options = Options()

    # Names are checked before the potentially expensive encoding step.
    name = multipart.field_name(model_name, attribute_name)

    encoded = image_.encode(
        image,
        image_type,
        quality,
        encoder=encoder,
        fallback_quality=options.fallback_quality,
    )
    body, content_type = multipart.build(
        encoded,
        attribute_name,
        model_name,
        other_attributes,
        check_collision=options.check_boundary_collision,
        max_attempts=options.boundary_attempts,
    )
    request = Request.make(
        options.http_method,
        url,
        content=body,
        headers={"content-type": content_type},
    )
    logger.debug(
        f"Built {request.method} request uploading {name} to {request.url} "
        f"({len(body)} bytes)."
    )
    return request


def upload_request_for_image(
    image: Any,
    image_type: image_.ImageType | str,
    quality: float | None,
    attribute_name: str,
    model_name: str,
    other_attributes: Mapping[str, str] | Iterable[tuple[str, str]] | None,
    url: str,
    *,
    options: Options | None = None,
    encoder: image_.ImageEncoder | None = None,
) -> Request | None:
    """
    Like `build_upload_request`, but returns None instead of raising if the
    request cannot be built. The reason is logged.
    """
    try:
        return build_upload_request(
            image,
            image_type,
            quality,
            attribute_name,
            model_name,
            other_attributes,
            url,
            options=options,
            encoder=encoder,
        )
    except exceptions.PaperclipException as e:
        logger.info(f"Could not build upload request for {url!r}: {e}")
        return None
