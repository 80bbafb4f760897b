import os, base64, re
from typing import Tuple

from .models import Attachment
from .settings import DEFAULT_MAX_ATTACHMENT_BYTES

# extension -> media type; only PDF and the two Word formats are accepted
ALLOWED_TYPES = {
    ".pdf": "application/pdf",
    ".doc": "application/msword",
    ".docx": "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
}

SLOTS = ("cv", "cover_letter")

class AttachmentError(ValueError):
    pass

def media_type_for(path: str) -> str:
    ext = os.path.splitext(path)[1].lower()
    if ext not in ALLOWED_TYPES:
        raise AttachmentError("Only PDF and Word documents are allowed")
    return ALLOWED_TYPES[ext]

def read_attachment(path: str, max_bytes: int = DEFAULT_MAX_ATTACHMENT_BYTES) -> Attachment:
    """Validate and encode a file; nothing is returned unless every check passes."""
    media_type = media_type_for(path)
    try:
        size = os.path.getsize(path)
        if size > max_bytes:
            raise AttachmentError(f"File size must be less than {max_bytes // (1024 * 1024)}MB")
        with open(path, "rb") as f:
            payload = f.read()
    except OSError as e:
        raise AttachmentError(f"Failed to upload file: {e}") from e
    encoded = base64.b64encode(payload).decode("ascii")
    return Attachment(
        name=os.path.basename(path),
        data=f"data:{media_type};base64,{encoded}",
        type=media_type,
    )

def decode_data_uri(data: str) -> Tuple[str, bytes]:
    m = re.match(r"^data:([^;,]*)(;base64)?,(.*)$", data, flags=re.S)
    if not m:
        raise AttachmentError("Attachment data is not a data URI")
    if not m.group(2):
        raise AttachmentError("Only base64 data URIs are supported")
    return m.group(1), base64.b64decode(m.group(3))

def save_attachment(attachment: Attachment, directory: str) -> str:
    _, payload = decode_data_uri(attachment.data)
    os.makedirs(directory, exist_ok=True)
    out_path = os.path.join(directory, os.path.basename(attachment.name))
    with open(out_path, "wb") as f:
        f.write(payload)
    return out_path
