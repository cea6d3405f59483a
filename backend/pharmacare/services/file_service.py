"""Avatar storage on local disk, served by the app under /files."""
import base64
import binascii
import logging
import uuid
from pathlib import Path
from typing import Optional

from pharmacare.core.config import settings

logger = logging.getLogger(__name__)

PUBLIC_PREFIX = "/files/"


class InvalidAvatarError(ValueError):
    pass


def upload_dir() -> Path:
    path = Path(settings.UPLOAD_DIR)
    path.mkdir(parents=True, exist_ok=True)
    return path


def decode_data_url(data: str) -> bytes:
    """Accept `data:image/...;base64,<payload>` or a bare base64 payload."""
    if not data or not data.strip():
        raise InvalidAvatarError("Invalid avatar data")

    payload = data.strip()
    if payload.startswith("data:"):
        header, _, payload = payload.partition(",")
        if not header.startswith("data:image/") or not header.endswith(";base64"):
            raise InvalidAvatarError("Invalid avatar data")

    try:
        content = base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError):
        raise InvalidAvatarError("Invalid avatar data")

    if not content:
        raise InvalidAvatarError("Invalid avatar data")
    return content


def remove_avatar(public_path: Optional[str]) -> None:
    """Delete a previously stored avatar. Paths outside the upload dir are ignored."""
    if not public_path or not public_path.startswith(PUBLIC_PREFIX):
        return
    target = upload_dir() / Path(public_path[len(PUBLIC_PREFIX):]).name
    try:
        target.unlink()
    except FileNotFoundError:
        logger.info(f"Old avatar {target.name} already gone")


def save_avatar(employee_id: int, data: str, previous: Optional[str] = None) -> str:
    """Write the decoded image and return its public path."""
    content = decode_data_url(data)

    filename = f"avatar-{employee_id}-{uuid.uuid4().hex}.jpg"
    (upload_dir() / filename).write_bytes(content)
    logger.info(f"Stored avatar {filename} ({len(content)} bytes) for employee {employee_id}")

    remove_avatar(previous)
    return PUBLIC_PREFIX + filename
