"""Error details domain model."""

from pydantic import BaseModel, ConfigDict


class ErrorDetails(BaseModel):
    """JSON body returned for failed requests."""

    model_config = ConfigDict(frozen=True)

    error: str
    status_code: int | None = None
