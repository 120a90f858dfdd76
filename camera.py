import asyncio
import logging
from enum import Enum

import cv2

from attachments import Attachment, validate_and_decode
from errors import ErrorKind, TutorError

log = logging.getLogger(__name__)

JPEG_QUALITY = 90


class CameraState(Enum):
    CLOSED = "closed"
    OPENING = "opening"
    LIVE = "live"
    CAPTURING = "capturing"
    ERROR = "error"


class CameraController:
    """Owns one video capture device and turns a live frame into an Attachment.

    The device handle is released on every exit path: explicit close(), a
    finished capture (successful or not), a failed open, and leaving the
    ``with`` block that owns the controller.
    """

    def __init__(self, device: int | str = 0):
        self.device = device
        self.state = CameraState.CLOSED
        self._capture = None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    @property
    def is_active(self) -> bool:
        return self.state is CameraState.LIVE

    async def open(self) -> TutorError | None:
        if self.state is not CameraState.CLOSED:
            log.info("Camera open ignored in state %s", self.state.name)
            return None

        self.state = CameraState.OPENING
        loop = asyncio.get_running_loop()
        try:
            capture = await loop.run_in_executor(None, cv2.VideoCapture, self.device)
            if self.state is not CameraState.OPENING:
                # closed while we were waiting on the device
                capture.release()
                return None
            self._capture = capture
            if not capture.isOpened():
                raise OSError(f"device {self.device!r} did not open")
        except Exception as e:
            log.warning("Camera %r unavailable: %s", self.device, e)
            self.state = CameraState.ERROR
            self.close()
            return TutorError(ErrorKind.DEVICE_UNAVAILABLE, "Unable to access camera. Please check permissions.")

        self.state = CameraState.LIVE
        log.info("Camera %r live", self.device)
        return None

    async def capture_frame(self) -> Attachment | TutorError:
        if self.state is not CameraState.LIVE:
            return TutorError(ErrorKind.CAPTURE_FAILURE, "Camera is not live.")

        self.state = CameraState.CAPTURING
        loop = asyncio.get_running_loop()
        try:
            jpeg = await loop.run_in_executor(None, self._grab_jpeg)
        except Exception as e:
            log.warning("Frame capture failed: %s", e)
            return TutorError(ErrorKind.CAPTURE_FAILURE, "Failed to capture image.")
        finally:
            self._release()

        log.info("Captured %d byte frame", len(jpeg))
        return await validate_and_decode(jpeg, "image/jpeg", len(jpeg))

    def close(self) -> None:
        if self.state is CameraState.CAPTURING:
            # the in-flight capture releases the device once its read returns
            log.info("Camera close deferred until capture finishes")
            return
        self._release()

    def _release(self) -> None:
        if self._capture is not None:
            try:
                self._capture.release()
            finally:
                self._capture = None
                log.info("Camera %r released", self.device)
        self.state = CameraState.CLOSED

    def _grab_jpeg(self) -> bytes:
        ok, frame = self._capture.read()
        if not ok or frame is None:
            raise OSError("no frame from device")
        ok, buf = cv2.imencode(".jpg", frame, [cv2.IMWRITE_JPEG_QUALITY, JPEG_QUALITY])
        if not ok:
            raise ValueError("JPEG encoding failed")
        return buf.tobytes()
