"""Attachment payloads stored inline as base64 data URIs.

Each attachment carries a sha256 checksum of its decoded bytes so a payload
that was altered after upload is detected when it is read back.
"""

import base64
import binascii
import hashlib
from datetime import datetime
from uuid import uuid4

from drafts.domain.entities import Attachment, AttachmentInput
from shared.exceptions import AttachmentIntegrityError, InvalidInputError

DEFAULT_CONTENT_TYPE = "application/octet-stream"


def checksum(data: bytes) -> str:
    return hashlib.sha256(data).hexdigest()


def build_attachment(upload: AttachmentInput, uploaded_at: datetime, max_bytes: int) -> Attachment:
    try:
        data = base64.b64decode(upload.base64_data, validate=True)
    except (binascii.Error, ValueError):
        raise InvalidInputError(f"Attachment {upload.filename!r} is not valid base64")
    if len(data) > max_bytes:
        raise InvalidInputError(f"Attachment {upload.filename!r} exceeds {max_bytes} bytes")

    content_type = upload.content_type or DEFAULT_CONTENT_TYPE
    return Attachment(
        id=f"draft-attachment-{uuid4()}",
        filename=upload.filename,
        content_type=content_type,
        size=len(data),
        data_url=f"data:{content_type};base64,{upload.base64_data}",
        checksum=checksum(data),
        uploaded_at=uploaded_at,
    )


def read_attachment(attachment: Attachment) -> bytes:
    _, _, payload = attachment.data_url.partition(";base64,")
    try:
        data = base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError):
        raise AttachmentIntegrityError(attachment.id)
    if checksum(data) != attachment.checksum:
        raise AttachmentIntegrityError(attachment.id)
    return data
