# tests/conftest.py
import os
from io import BytesIO
from types import SimpleNamespace

import numpy as np
import pytest
from fastapi.testclient import TestClient
from PIL import Image

# Never reach out to the model bucket during tests
os.environ.setdefault("MODEL_LOAD_ON_STARTUP", "0")

import database  # noqa: E402
import main  # noqa: E402
from inference import ClassifierModel  # noqa: E402


class FakeSession:
    """Stands in for onnxruntime.InferenceSession and returns a fixed score."""

    def __init__(self, score=0.9):
        self.score = score
        self.feeds = []

    def get_inputs(self):
        return [SimpleNamespace(name="input_1")]

    def get_outputs(self):
        return [SimpleNamespace(name="dense_1")]

    def run(self, output_names, feed):
        self.feeds.append(feed)
        return [np.array([[self.score]], dtype=np.float32)]


class FakeDocument:
    def __init__(self, store, collection, doc_id):
        self.store = store
        self.collection = collection
        self.doc_id = doc_id

    def set(self, data):
        if self.store.error is not None:
            raise self.store.error
        self.store.documents[(self.collection, self.doc_id)] = dict(data)


class FakeCollection:
    def __init__(self, store, name):
        self.store = store
        self.name = name

    def document(self, doc_id):
        return FakeDocument(self.store, self.name, doc_id)


class FakeFirestore:
    def __init__(self, error=None):
        self.documents = {}
        self.error = error

    def collection(self, name):
        return FakeCollection(self, name)

    def in_collection(self, name):
        return {doc_id: data for (coll, doc_id), data in self.documents.items() if coll == name}


def make_image_bytes(size=(64, 48), color=(200, 30, 30), fmt="PNG", mode="RGB"):
    buffer = BytesIO()
    Image.new(mode, size, color).save(buffer, format=fmt)
    return buffer.getvalue()


@pytest.fixture
def image_bytes():
    return make_image_bytes()


@pytest.fixture
def session():
    return FakeSession(score=0.9)


@pytest.fixture
def classifier(monkeypatch):
    """A fresh, not-yet-loaded classifier wired into the app."""
    model = ClassifierModel("https://example.invalid/model.onnx")
    monkeypatch.setattr(main, "classifier", model)
    return model


@pytest.fixture
def loaded_classifier(classifier, session):
    classifier.set_session(session)
    return classifier


@pytest.fixture
def firestore(monkeypatch):
    fake = FakeFirestore()
    monkeypatch.setattr(database, "get_db", lambda: fake)
    return fake


@pytest.fixture
def client():
    # no context manager: lifespan (model download) stays off
    return TestClient(main.app)


@pytest.fixture
def make_image():
    return make_image_bytes
