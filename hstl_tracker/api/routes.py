"""
API Routes
Login and recruitment endpoints.
"""
import json
from typing import Any, Dict, Optional, Type, TypeVar

import pydantic
from fastapi import APIRouter, Depends, Request

from ..core.errors import InvalidCredentials, ValidationError
from ..models import (
    CreateRecruitmentRequest,
    DeleteRecruitmentRequest,
    LoginRequest,
    PaidOutStatus,
    UpdateRecruitmentRequest,
)
from ..security.access_guard import require_admin
from ..security.session_issuer import SessionIssuer, get_session_issuer
from ..store.recruitment_store import RecruitmentStore

router = APIRouter()

BodyT = TypeVar("BodyT", bound=pydantic.BaseModel)


def get_store(request: Request) -> RecruitmentStore:
    """The store the application was created with"""
    return request.app.state.store


async def read_body(request: Request, model: Type[BodyT]) -> BodyT:
    """Parse a JSON object body into `model`, raising ValidationError on bad input."""
    raw = await request.body()
    try:
        data = json.loads(raw) if raw else {}
    except (ValueError, RecursionError):
        raise ValidationError("Invalid JSON body")
    if not isinstance(data, dict):
        raise ValidationError("Invalid JSON body")

    try:
        return model.model_validate(data)
    except pydantic.ValidationError as e:
        fields = sorted({str(err["loc"][0]) for err in e.errors() if err.get("loc")})
        raise ValidationError(f"Invalid value for: {', '.join(fields)}")


@router.post("/auth")
async def login(request: Request, issuer: SessionIssuer = Depends(get_session_issuer)):
    """Exchange the admin password for a bearer token"""
    try:
        body = await read_body(request, LoginRequest)
    except ValidationError:
        raise InvalidCredentials()
    token = issuer.login(body.password)
    return {"token": token}


@router.get("/auth/session")
async def session_status(claims: Dict[str, Any] = Depends(require_admin)):
    """Report whether the presented token grants admin access"""
    return {"isAdmin": True, "exp": claims.get("exp")}


@router.get("/recruitments")
async def list_recruitments(
    search: Optional[str] = None,
    store: RecruitmentStore = Depends(get_store),
):
    """List all recruitments, newest first"""
    records = await store.list(search=search.strip() if search else None)
    return [record.to_json() for record in records]


@router.post("/recruitments", status_code=201)
async def create_recruitment(
    request: Request,
    claims: Dict[str, Any] = Depends(require_admin),
    store: RecruitmentStore = Depends(get_store),
):
    """Add a recruitment (admin only)"""
    body = await read_body(request, CreateRecruitmentRequest)
    if not body.complete:
        raise ValidationError("Missing required fields")

    record = await store.insert(
        hstl_member=body.hstlMember,
        recruited_member=body.recruitedMember,
        paid_out=body.paidOut or PaidOutStatus.PENDING,
    )
    return {
        "message": "Recruitment added successfully",
        "recruitment": record.to_json(),
    }


@router.put("/recruitments")
async def update_recruitment(
    request: Request,
    claims: Dict[str, Any] = Depends(require_admin),
    store: RecruitmentStore = Depends(get_store),
):
    """Change the paidOut status of a recruitment (admin only)"""
    body = await read_body(request, UpdateRecruitmentRequest)
    if not body.id or not body.paidOut:
        raise ValidationError("Missing required fields")

    # Unknown ids are a no-op, same as a repeated update
    await store.update_paid_out(body.id, body.paidOut)
    return {"message": "Recruitment updated successfully"}


@router.delete("/recruitments")
async def delete_recruitment(
    request: Request,
    claims: Dict[str, Any] = Depends(require_admin),
    store: RecruitmentStore = Depends(get_store),
):
    """Remove a recruitment (admin only)"""
    body = await read_body(request, DeleteRecruitmentRequest)
    if not body.id:
        raise ValidationError("Missing recruitment id")

    await store.delete(body.id)
    return {"message": "Recruitment deleted successfully"}
