import cv2
import mediapipe as mp
import numpy as np

from proctorview.room.media import Frame


class MediaPipeFaceCounter:
    """Counts faces in one camera frame with MediaPipe face detection."""

    def __init__(self, min_detection_confidence=0.6):
        self.mp_face = mp.solutions.face_detection
        self.detector = self.mp_face.FaceDetection(
            model_selection=0,
            min_detection_confidence=min_detection_confidence
        )

    def _decode(self, image):
        if isinstance(image, (bytes, bytearray)):
            image = cv2.imdecode(np.frombuffer(image, np.uint8), cv2.IMREAD_COLOR)
        if image is None:
            raise ValueError("Failed to decode frame")
        return image

    def count_faces(self, frame: Frame) -> int:
        rgb = cv2.cvtColor(self._decode(frame.image), cv2.COLOR_BGR2RGB)
        result = self.detector.process(rgb)

        if not result.detections:
            return 0
        return len(result.detections)
