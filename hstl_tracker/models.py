"""
Recruitment Models
Records kept by the store and the request bodies accepted by the API.
"""
import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional
from pydantic import BaseModel, ConfigDict, Field, model_validator


class PaidOutStatus(str, Enum):
    """Whether the recruitment bonus has been disbursed"""
    PENDING = "Pending"
    PAID = "Paid"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def new_record_id() -> str:
    return uuid.uuid4().hex


class RecruitmentRecord(BaseModel):
    """A single recruitment bonus entry"""
    id: str = Field(default_factory=new_record_id, alias="_id")
    hstlMember: str = Field(..., min_length=1)
    recruitedMember: str = Field(..., min_length=1)
    paidOut: PaidOutStatus = PaidOutStatus.PENDING
    createdAt: datetime = Field(default_factory=_utcnow)

    model_config = ConfigDict(populate_by_name=True)

    def to_json(self) -> dict:
        """Wire representation, keeping the `_id` key."""
        return self.model_dump(by_alias=True, mode="json")


class RequestBody(BaseModel):
    """Request body where blank strings count as missing."""

    @model_validator(mode="before")
    @classmethod
    def blank_to_none(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        cleaned = {}
        for key, value in data.items():
            if isinstance(value, str):
                value = value.strip() or None
            cleaned[key] = value
        return cleaned


class CreateRecruitmentRequest(RequestBody):
    hstlMember: Optional[str] = None
    recruitedMember: Optional[str] = None
    paidOut: Optional[PaidOutStatus] = None

    @property
    def complete(self) -> bool:
        return bool(self.hstlMember and self.recruitedMember)


class UpdateRecruitmentRequest(RequestBody):
    id: Optional[str] = None
    paidOut: Optional[PaidOutStatus] = None


class DeleteRecruitmentRequest(RequestBody):
    id: Optional[str] = None


class LoginRequest(BaseModel):
    password: Optional[str] = None
