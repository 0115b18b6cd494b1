"""
FacePositionDetector - finds the eye line of the main face in a photo.

Used offline by scripts/batch_face_detection.py to fill Person.eye_center_y,
which the home screen uses to frame cropped category backgrounds.

detect() never raises. Undecodable images, photos without a face and
low-confidence detections all resolve to the default eye position.
"""

from typing import Optional

import cv2
import numpy as np
from pydantic import BaseModel, Field

from family_directory.core.config import settings
from family_directory.core.exceptions import InvalidImageError
from family_directory.core.logging import get_logger
from family_directory.infrastructure.images import decode_data_image

logger = get_logger(__name__)

# Eyes sit roughly 40% down a frontal face box
FACE_BOX_EYE_RATIO = 0.4

MIN_POSITION = 0.1
MAX_POSITION = 0.9


class FacePosition(BaseModel):
    """Detection result; vertical_position is relative to image height."""

    detected: bool
    vertical_position: float = Field(..., ge=0.0, le=1.0)
    confidence: float = Field(0.0, ge=0.0, le=1.0)


class FacePositionDetector:
    """
    OpenCV Haar cascade detector for face and eye positions.

    Cascades are loaded on first use.
    """

    def __init__(self, default_position: float = None, min_confidence: float = None):
        self.default_position = (
            default_position if default_position is not None else settings.default_eye_position
        )
        self.min_confidence = (
            min_confidence if min_confidence is not None else settings.face_min_confidence
        )
        self._face_cascade = None
        self._eye_cascade = None

    def _ensure_loaded(self):
        if self._face_cascade is None:
            self._face_cascade = cv2.CascadeClassifier(
                cv2.data.haarcascades + "haarcascade_frontalface_default.xml"
            )
            self._eye_cascade = cv2.CascadeClassifier(
                cv2.data.haarcascades + "haarcascade_eye.xml"
            )
            logger.info("[FaceDetection] Haar cascades loaded")

    def _fallback(self, reason: str) -> FacePosition:
        logger.debug(f"[FaceDetection] Using default position: {reason}")
        return FacePosition(detected=False, vertical_position=self.default_position, confidence=0.0)

    def detect(self, image: str) -> FacePosition:
        try:
            _, raw = decode_data_image(image)
            gray = cv2.imdecode(np.frombuffer(raw, np.uint8), cv2.IMREAD_GRAYSCALE)
            if gray is None:
                return self._fallback("image could not be decoded")

            self._ensure_loaded()
            height, width = gray.shape[:2]
            min_side = max(24, min(height, width) // 10)

            faces = self._face_cascade.detectMultiScale(
                gray, scaleFactor=1.1, minNeighbors=5, minSize=(min_side, min_side)
            )
            if len(faces) == 0:
                return self._fallback("no face detected")

            # Largest face is the subject
            x, y, w, h = max(faces, key=lambda f: f[2] * f[3])
            face_region = gray[y:y + h, x:x + w]
            eyes = [
                (ex, ey, ew, eh)
                for ex, ey, ew, eh in self._eye_cascade.detectMultiScale(face_region, 1.1, 5)
                if ey + eh / 2 < h * 0.6
            ]

            if eyes:
                eye_line = y + float(np.mean([ey + eh / 2 for _, ey, _, eh in eyes]))
                confidence = 0.9 if len(eyes) >= 2 else 0.6
            else:
                eye_line = y + h * FACE_BOX_EYE_RATIO
                confidence = 0.4

            position = min(MAX_POSITION, max(MIN_POSITION, eye_line / height))
            return FacePosition(
                detected=True,
                vertical_position=round(position, 3),
                confidence=confidence,
            )
        except InvalidImageError as e:
            return self._fallback(e.message)
        except cv2.error as e:
            logger.warning(f"[FaceDetection] OpenCV error: {e}")
            return self._fallback("opencv error")

    def resolve_position(self, result: Optional[FacePosition]) -> float:
        """Eye position to store: the detection when trustworthy, the default otherwise."""
        if result is None or not result.detected or result.confidence < self.min_confidence:
            return self.default_position
        return result.vertical_position
