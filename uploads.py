from typing import Optional

from starlette.datastructures import FormData, UploadFile
from starlette.requests import Request
from starlette.types import Receive

import config
from errors import PayloadTooLarge, UnexpectedField, ValidationError

BODY_LIMIT = config.MAX_UPLOAD_BYTES + config.MULTIPART_OVERHEAD_BYTES


def limit_receive(receive: Receive, limit: int = BODY_LIMIT) -> Receive:
    """Wrap an ASGI receive callable so reading stops once the body passes ``limit`` bytes."""
    received = 0

    async def limited():
        nonlocal received
        message = await receive()
        if message["type"] == "http.request":
            received += len(message.get("body", b""))
            if received > limit:
                raise PayloadTooLarge()
        return message

    return limited


def bounded_request(request: Request, limit: int = BODY_LIMIT) -> Request:
    """Reject bodies that are too large before any multipart parsing happens.

    Content-Length is checked up front; chunked bodies are cut off while streaming.
    """
    length = request.headers.get("content-length", "")
    if length.isdigit() and int(length) > limit:
        raise PayloadTooLarge()
    return Request(request.scope, receive=limit_receive(request.receive, limit))


async def read_image_upload(form: FormData) -> Optional[bytes]:
    """Validate the single ``image`` file part of a multipart form and return its bytes.

    Returns None when the form carries no file at all.
    """
    files = [(field, value) for field, value in form.multi_items() if isinstance(value, UploadFile)]
    if not files:
        return None

    if len(files) > 1 or files[0][0] != config.UPLOAD_FIELD:
        raise UnexpectedField()

    upload = files[0][1]
    if not (upload.content_type or "").startswith("image/"):
        raise ValidationError()

    content = await upload.read(config.MAX_UPLOAD_BYTES + 1)
    if len(content) > config.MAX_UPLOAD_BYTES:
        raise PayloadTooLarge()
    return content
