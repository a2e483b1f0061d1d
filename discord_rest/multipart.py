"""
Multipart form encoding for requests that carry file attachments.
"""

from __future__ import annotations

import json
import mimetypes
from dataclasses import dataclass
from typing import Any, Sequence

from urllib3.fields import RequestField
from urllib3.filepost import encode_multipart_formdata

from discord_rest.models import MessageFile

PAYLOAD_FIELD = "payload_json"


@dataclass(slots=True, frozen=True)
class MultipartBody:
    content: bytes
    content_type: str


def encode_files(
    files: Sequence[MessageFile],
    payload: Any = None,
    *,
    boundary: str | None = None,
) -> MultipartBody:
    """Encode attachments, plus the JSON payload when present, as form-data."""

    fields: list[RequestField] = []
    for attachment in files:
        field = RequestField(name=attachment.name, data=attachment.file, filename=attachment.name)
        mime_type = mimetypes.guess_type(attachment.name)[0] or "application/octet-stream"
        field.make_multipart(content_type=mime_type)
        fields.append(field)

    if payload is not None:
        field = RequestField(name=PAYLOAD_FIELD, data=json.dumps(payload))
        field.make_multipart(content_type="application/json")
        fields.append(field)

    content, content_type = encode_multipart_formdata(fields, boundary=boundary)
    return MultipartBody(content=content, content_type=content_type)
