import base64
import hashlib
from dataclasses import replace
from datetime import datetime, timezone

import pytest

from drafts.domain.entities import AttachmentInput
from drafts.infrastructure.blob_storage import build_attachment, read_attachment
from shared.exceptions import AttachmentIntegrityError, InvalidInputError

NOW = datetime(2024, 5, 1, tzinfo=timezone.utc)


def upload(data: bytes, **kwargs) -> AttachmentInput:
    return AttachmentInput(
        filename=kwargs.get("filename", "notes.txt"),
        content_type=kwargs.get("content_type", "text/plain"),
        base64_data=base64.b64encode(data).decode(),
    )


def test_build_attachment():
    attachment = build_attachment(upload(b"hello"), NOW, max_bytes=1024)
    assert attachment.id.startswith("draft-attachment-")
    assert attachment.size == 5
    assert attachment.data_url == "data:text/plain;base64,aGVsbG8="
    assert attachment.checksum == hashlib.sha256(b"hello").hexdigest()
    assert attachment.uploaded_at == NOW


def test_build_attachment_defaults_content_type():
    attachment = build_attachment(upload(b"x", content_type=""), NOW, max_bytes=1024)
    assert attachment.content_type == "application/octet-stream"


def test_build_attachment_rejects_bad_base64():
    bad = AttachmentInput(filename="a.bin", content_type="", base64_data="not base64!!")
    with pytest.raises(InvalidInputError):
        build_attachment(bad, NOW, max_bytes=1024)


def test_build_attachment_rejects_oversize():
    with pytest.raises(InvalidInputError, match="exceeds"):
        build_attachment(upload(b"x" * 20), NOW, max_bytes=10)


def test_read_attachment_verifies_checksum():
    attachment = build_attachment(upload(b"payload"), NOW, max_bytes=1024)
    assert read_attachment(attachment) == b"payload"

    tampered = replace(attachment, data_url="data:text/plain;base64," + base64.b64encode(b"other").decode())
    with pytest.raises(AttachmentIntegrityError):
        read_attachment(tampered)
