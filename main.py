import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.formparsers import MultiPartException

import config
from database import save_prediction, write_test_document
from errors import InternalFailure, MalformedUpload, ModelNotReady, PredictionError, UploadMissing
from inference import classifier, interpret_score
from logging_config import setup_logging
from schemas import Envelope, HealthResponse, PredictionRecord
from uploads import bounded_request, read_image_upload

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging()
    if config.MODEL_LOAD_ON_STARTUP:
        classifier.start_loading()
    else:
        logger.warning("MODEL_LOAD_ON_STARTUP is off; /predict will fail until a model is loaded")
    yield


app = FastAPI(title="Asclepius Cancer Prediction API", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def fail(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=Envelope(status="fail", message=message).body())


@app.exception_handler(PredictionError)
async def prediction_error_handler(request: Request, exc: PredictionError):
    return fail(exc.status_code, exc.message)


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    return fail(exc.status_code, str(exc.detail))


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return fail(500, str(exc) or "Internal Server Error")


@app.get("/")
async def root():
    return {"message": "Asclepius Cancer Prediction API"}


@app.get("/health", response_model=HealthResponse)
async def health():
    return HealthResponse(status="ok", modelLoaded=classifier.is_ready)


@app.post("/predict")
async def predict(request: Request):
    request = bounded_request(request)
    try:
        form = await request.form()
    except StarletteHTTPException as exc:
        raise MalformedUpload(str(exc.detail)) from exc
    except MultiPartException as exc:
        raise MalformedUpload(exc.message) from exc
    try:
        content = await read_image_upload(form)
    finally:
        await form.close()

    if not classifier.is_ready:
        raise ModelNotReady()
    if content is None:
        raise UploadMissing()

    try:
        score = await run_in_threadpool(classifier.predict, content)
        result, suggestion = interpret_score(score)
        record = PredictionRecord.create(result, suggestion)
        await run_in_threadpool(save_prediction, record)
    except ModelNotReady:
        raise
    except Exception as exc:
        logger.exception("Error during prediction")
        raise InternalFailure() from exc

    logger.info("Prediction %s stored: %s", record.id, record.result)
    body = Envelope(status="success", message="Prediction successful", data=record)
    return JSONResponse(status_code=200, content=body.body())


@app.get("/test-firestore")
async def firestore_check():
    try:
        await run_in_threadpool(write_test_document)
    except Exception as exc:
        logger.exception("Error testing Firestore")
        return fail(500, str(exc))
    return Envelope(status="success", message="Firestore connected!").body()


if __name__ == "__main__":
    import uvicorn

    setup_logging()
    logger.info("Server running on http://localhost:%s", config.PORT)
    uvicorn.run(app, host="0.0.0.0", port=config.PORT)
