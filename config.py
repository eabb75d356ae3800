import os

PORT = int(os.getenv("PORT", 8080))

MODEL_URL = os.getenv(
    "MODEL_URL",
    "https://storage.googleapis.com/bucket-applied/submissions-model/model.onnx",
)
MODEL_FETCH_TIMEOUT = float(os.getenv("MODEL_FETCH_TIMEOUT", 30))
MODEL_LOAD_ON_STARTUP = os.getenv("MODEL_LOAD_ON_STARTUP", "1").lower() not in ("0", "false", "no")
MODEL_INPUT_SIZE = (224, 224)  # width, height

SERVICE_ACCOUNT_KEY = os.getenv("SERVICE_ACCOUNT_KEY", "serviceAccountKey.json")
PREDICTIONS_COLLECTION = os.getenv("PREDICTIONS_COLLECTION", "predictions")

MAX_UPLOAD_BYTES = 1_000_000
# room for boundaries and part headers; keeps accepted bodies under the 1MB spool threshold
MULTIPART_OVERHEAD_BYTES = 16 * 1024
UPLOAD_FIELD = "image"

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]
