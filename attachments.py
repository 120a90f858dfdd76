import asyncio
import base64
import hashlib
import logging
import mimetypes
from dataclasses import dataclass, field
from pathlib import Path

from errors import ErrorKind, TutorError

log = logging.getLogger(__name__)

MAX_IMAGE_BYTES = 10 * 1024 * 1024  # 10MB limit


@dataclass(frozen=True)
class Attachment:
    raw_bytes: bytes        # raw image bytes
    encoded_payload: str    # base64 of raw_bytes
    mime_type: str          # e.g. "image/jpeg", "image/png"
    preview_handle: str     # data URL, renderable anywhere
    key: str = field(init=False)

    def __post_init__(self):
        object.__setattr__(self, "key", hashlib.sha256(self.raw_bytes).hexdigest())


def _encode(raw: bytes, mime_type: str) -> Attachment:
    payload = base64.b64encode(raw).decode()
    return Attachment(
        raw_bytes=raw,
        encoded_payload=payload,
        mime_type=mime_type,
        preview_handle=f"data:{mime_type};base64,{payload}",
    )


def _check(mime_type: str, size: int) -> None:
    if not (mime_type or "").startswith("image/"):
        raise TutorError(ErrorKind.UNSUPPORTED_TYPE, "Please upload an image file (JPEG, PNG, WEBP).")
    if size > MAX_IMAGE_BYTES:
        raise TutorError(ErrorKind.TOO_LARGE, "Image is too large. Please upload an image smaller than 10MB.")


async def validate_and_decode(source: bytes | str | Path, mime_type: str, size: int) -> Attachment | TutorError:
    """Validate an image source and decode it into an Attachment.

    source is either the image bytes or a path to read them from. Type and
    size are checked before anything is read. Failures come back as a
    TutorError value instead of being raised.
    """
    try:
        _check(mime_type, size)
        if isinstance(source, (bytes, bytearray)):
            raw = bytes(source)
        else:
            loop = asyncio.get_running_loop()
            raw = await loop.run_in_executor(None, Path(source).read_bytes)
        if not raw:
            raise TutorError(ErrorKind.READ_FAILURE, "Failed to read file.")
        # the declared size may lie, the bytes don't
        _check(mime_type, len(raw))
        return _encode(raw, mime_type)
    except TutorError as e:
        log.warning("Image rejected (%s): %s", e.kind.name, e.message)
        return e
    except (OSError, ValueError) as e:
        log.warning("Image read failed: %s", e)
        return TutorError(ErrorKind.READ_FAILURE, "Failed to read file.")


async def load_file(path: str | Path) -> Attachment | TutorError:
    """Attach a file from disk, guessing its type from the filename."""
    try:
        path = Path(path).expanduser()
        size = path.stat().st_size
    except (OSError, ValueError, RuntimeError) as e:
        log.warning("Cannot stat %s: %s", path, e)
        return TutorError(ErrorKind.READ_FAILURE, "Failed to read file.")
    mime_type = mimetypes.guess_type(path.name)[0] or "application/octet-stream"
    return await validate_and_decode(path, mime_type, size)
