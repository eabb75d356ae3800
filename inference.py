import logging
import threading
from io import BytesIO
from typing import Optional, Tuple

import numpy as np
import requests
from PIL import Image

import config
from errors import DecodeError, ModelNotReady

logger = logging.getLogger(__name__)

CANCER_THRESHOLD = 0.5
SUGGESTIONS = {
    "Cancer": "Segera periksa ke dokter!",
    "Non-cancer": "Penyakit kanker tidak terdeteksi.",
}


def preprocess_image(file_bytes: bytes) -> np.ndarray:
    """Decode to RGB, bilinear-resize to 224x224 and scale to [0, 1] as a (1, 224, 224, 3) batch."""
    img = Image.open(BytesIO(file_bytes)).convert("RGB")
    img = img.resize(config.MODEL_INPUT_SIZE, Image.Resampling.BILINEAR)
    arr = np.asarray(img, dtype=np.float32)
    arr = np.expand_dims(arr, 0)  # NHWC
    return arr / 255.0


def interpret_score(score: float) -> Tuple[str, str]:
    result = "Cancer" if score > CANCER_THRESHOLD else "Non-cancer"
    return result, SUGGESTIONS[result]


class ClassifierModel:
    def __init__(self, model_url: str, fetch_timeout: float = config.MODEL_FETCH_TIMEOUT):
        self.model_url = model_url
        self.fetch_timeout = fetch_timeout
        self._session = None
        self._input_name: Optional[str] = None
        self._output_name: Optional[str] = None
        self._ready = threading.Event()

    @property
    def is_ready(self) -> bool:
        return self._ready.is_set()

    def fetch(self) -> bytes:
        resp = requests.get(self.model_url, timeout=self.fetch_timeout)
        resp.raise_for_status()
        return resp.content

    def set_session(self, session) -> None:
        """Install an inference session and mark the model ready. Only the first call wins."""
        if self.is_ready:
            return
        self._session = session
        self._input_name = session.get_inputs()[0].name
        self._output_name = session.get_outputs()[0].name
        self._ready.set()

    def load(self) -> bool:
        """Fetch and load the model once. Failures are logged, never retried."""
        if self.is_ready:
            return True
        logger.info("Loading model from %s", self.model_url)
        try:
            import onnxruntime as ort  # type: ignore

            session = ort.InferenceSession(self.fetch(), providers=["CPUExecutionProvider"])
            self.set_session(session)
        except Exception:
            logger.exception("Error loading model")
            return False
        logger.info("Model loaded successfully!")
        return True

    def start_loading(self) -> threading.Thread:
        """Run load() once in the background so the server can start accepting requests."""
        thread = threading.Thread(target=self.load, name="model-loader", daemon=True)
        thread.start()
        return thread

    def predict(self, file_bytes: bytes) -> float:
        if not self.is_ready:
            raise ModelNotReady()
        try:
            batch = preprocess_image(file_bytes)
        except (OSError, ValueError, Image.DecompressionBombError) as exc:
            raise DecodeError(f"Could not decode image: {exc}") from exc
        outputs = self._session.run([self._output_name], {self._input_name: batch})
        return float(np.asarray(outputs[0])[0][0])


classifier = ClassifierModel(config.MODEL_URL)
