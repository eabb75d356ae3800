class PredictionError(Exception):
    status_code = 500
    message = "Internal Server Error"

    def __init__(self, message=None):
        if message is not None:
            self.message = message
        super().__init__(self.message)


class ValidationError(PredictionError):
    message = "File must be an image"


class PayloadTooLarge(PredictionError):
    status_code = 413
    message = "Payload content length greater than maximum allowed: 1MB"


class UploadMissing(PredictionError):
    status_code = 400
    message = "File not uploaded"


class UnexpectedField(PredictionError):
    message = "Unexpected field"


class MalformedUpload(PredictionError):
    # parser message is passed through, like any other uncaught error
    message = "Invalid multipart data."


class ModelNotReady(PredictionError):
    message = "Model is not loaded yet. Please try again later."


class InternalFailure(PredictionError):
    message = "An error occurred during prediction"


class DecodeError(InternalFailure):
    pass


class StoreError(InternalFailure):
    pass
