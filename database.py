# Firestore record store; the client is created on first use.
import logging
import threading
from typing import Any, Dict

from google.cloud import firestore  # type: ignore

import config
from errors import StoreError
from schemas import PredictionRecord, utc_timestamp

logger = logging.getLogger(__name__)

_db = None
_db_lock = threading.Lock()


def get_db():
    global _db
    with _db_lock:
        if _db is None:
            try:
                _db = firestore.Client.from_service_account_json(config.SERVICE_ACCOUNT_KEY)
            except Exception as exc:
                raise StoreError(str(exc)) from exc
    return _db


def create_document(collection: str, doc_id: str, data: Dict[str, Any]) -> None:
    db = get_db()
    try:
        db.collection(collection).document(doc_id).set(data)
    except Exception as exc:
        logger.exception("Failed to write %s/%s", collection, doc_id)
        raise StoreError(str(exc)) from exc


def save_prediction(record: PredictionRecord) -> None:
    create_document(config.PREDICTIONS_COLLECTION, record.id, record.model_dump())


def write_test_document() -> None:
    create_document("test", "testDoc", {
        "message": "Hello, Firestore!",
        "timestamp": utc_timestamp(),
    })
