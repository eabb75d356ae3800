import uuid
from datetime import datetime, timezone
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

Label = Literal["Cancer", "Non-cancer"]


def utc_timestamp() -> str:
    """ISO-8601 UTC timestamp with millisecond precision, e.g. 2024-05-01T10:00:00.000Z"""
    now = datetime.now(timezone.utc)
    return now.isoformat(timespec="milliseconds").replace("+00:00", "Z")


class PredictionRecord(BaseModel):
    """Predictions collection schema
    Collection name: "predictions", document id == record id
    """
    model_config = ConfigDict(frozen=True)

    id: str = Field(..., description="Random UUID4, also used as the document id")
    result: Label = Field(..., description="Interpreted class label")
    suggestion: str = Field(..., description="Static advice shown for the label")
    createdAt: str = Field(..., description="ISO timestamp when the prediction was made")

    @classmethod
    def create(cls, result: str, suggestion: str) -> "PredictionRecord":
        return cls(
            id=str(uuid.uuid4()),
            result=result,
            suggestion=suggestion,
            createdAt=utc_timestamp(),
        )


class Envelope(BaseModel):
    status: Literal["success", "fail"]
    message: str
    data: Optional[PredictionRecord] = None

    def body(self) -> dict:
        # data is left out of the JSON entirely on failures
        return self.model_dump(exclude_none=True)


class HealthResponse(BaseModel):
    status: str
    modelLoaded: bool
