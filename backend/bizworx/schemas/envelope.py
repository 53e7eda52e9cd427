from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel
from typing import Generic, Optional, TypeVar
from datetime import datetime

DataT = TypeVar("DataT")


class BusinessVerification(BaseModel):
    """Lets an external agent confirm which tenant the data came from."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    business_name: str
    business_id: int
    data_source: str = "database"
    timestamp: datetime


class GptEnvelope(BaseModel, Generic[DataT]):
    """Response wrapper for the API-key surface (/api/gpt, /api/external)."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    success: bool = True
    data: DataT
    message: Optional[str] = None
    business_verification: BusinessVerification


class MessageResponse(BaseModel):
    message: str
