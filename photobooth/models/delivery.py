from enum import Enum
from typing import Annotated, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class DeliveryRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    recipients: List[str]
    image: str
    image_mime: str = Field(default="image/png", alias="imageMime")


class ErrorResponse(BaseModel):
    status: Literal["error"]
    message: str


class PartialResponse(BaseModel):
    status: Literal["partial"]
    failed_addresses: List[str]


class SuccessResponse(BaseModel):
    status: Literal["success"]


ServerResponse = Annotated[
    Union[ErrorResponse, PartialResponse, SuccessResponse],
    Field(discriminator="status")
]


class DeliveryOutcome(str, Enum):
    success = "success"
    partial_success = "partial_success"
    failure = "failure"
    decode_failure = "decode_failure"
    transfer_failure = "transfer_failure"


class DeliveryResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    outcome: DeliveryOutcome
    reason: Optional[str] = None
    failed_addresses: List[str] = []

    @classmethod
    def success(cls) -> "DeliveryResult":
        return cls(outcome=DeliveryOutcome.success)

    @classmethod
    def partial_success(cls, failed_addresses: List[str]) -> "DeliveryResult":
        return cls(outcome=DeliveryOutcome.partial_success, failed_addresses=list(failed_addresses))

    @classmethod
    def failure(cls, reason: str) -> "DeliveryResult":
        return cls(outcome=DeliveryOutcome.failure, reason=reason)

    @classmethod
    def decode_failure(cls) -> "DeliveryResult":
        return cls(outcome=DeliveryOutcome.decode_failure)

    @classmethod
    def transfer_failure(cls) -> "DeliveryResult":
        return cls(outcome=DeliveryOutcome.transfer_failure)
