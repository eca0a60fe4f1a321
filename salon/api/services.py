"""Service catalog API endpoints."""

from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException, Response, status
from pydantic import BaseModel, Field
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from salon.api.deps import get_db, get_snapshot
from salon.core.logging import get_logger
from salon.models.service import Service
from salon.scheduling.snapshot import AppointmentSnapshot
from salon.store import queries
from salon.store.queries import RecordNotFoundError

logger = get_logger(__name__)

router = APIRouter(prefix="/api/services", tags=["services"])

# Swatches offered by the service form: vibrant, pastel and deep tones.
SERVICE_COLORS = [
    "#FF0000", "#00FF00", "#0000FF", "#FF00FF",
    "#00FFFF", "#FF8000", "#8000FF", "#FF0080",
    "#FFB3BA", "#BAFFC9", "#BAE1FF", "#FFB3F7",
    "#E0BBE4", "#957DAD", "#FEC8D8", "#FFDFD3",
    "#800000", "#008000", "#000080", "#800080",
    "#008080", "#804000", "#400080", "#804040",
]  # fmt: skip


class ServiceCreateRequest(BaseModel):
    """Payload for creating a service."""

    name: str = Field(max_length=255)
    duration: int = Field(default=30, gt=0, description="Length in minutes")
    color: str = Field(default=SERVICE_COLORS[0], max_length=32)


class ServiceUpdateRequest(BaseModel):
    """Payload for updating a service."""

    name: str | None = Field(default=None, max_length=255)
    duration: int | None = Field(default=None, gt=0)
    color: str | None = Field(default=None, max_length=32)


class ServiceResponse(BaseModel):
    """Service response model."""

    id: int
    name: str
    duration: int
    color: str
    created_at: datetime
    updated_at: datetime | None


def _to_service_response(service: Service) -> ServiceResponse:
    """Map SQLAlchemy service model to response model."""
    return ServiceResponse(
        id=service.id,
        name=service.name,
        duration=service.duration,
        color=service.color,
        created_at=service.created_at,
        updated_at=service.updated_at,
    )


@router.get("/colors", response_model=list[str])
async def list_colors() -> list[str]:
    """Palette offered when creating or editing a service."""
    return SERVICE_COLORS


@router.post("", response_model=ServiceResponse, status_code=status.HTTP_201_CREATED)
async def create_service(
    payload: ServiceCreateRequest,
    db: AsyncSession = Depends(get_db),
) -> ServiceResponse:
    """Create a new service."""
    service = await queries.create_service(db, **payload.model_dump())
    return _to_service_response(service)


@router.get("", response_model=list[ServiceResponse])
async def list_services(
    db: AsyncSession = Depends(get_db),
) -> list[ServiceResponse]:
    """List services in creation order."""
    services = await queries.list_services(db)
    return [_to_service_response(service) for service in services]


@router.get("/{service_id}", response_model=ServiceResponse)
async def get_service(
    service_id: int,
    db: AsyncSession = Depends(get_db),
) -> ServiceResponse:
    """Get service by ID."""
    try:
        service = await queries.get_service(db, service_id)
    except RecordNotFoundError as exc:
        raise HTTPException(status_code=404, detail="Service not found") from exc
    return _to_service_response(service)


@router.patch("/{service_id}", response_model=ServiceResponse)
async def update_service(
    service_id: int,
    payload: ServiceUpdateRequest,
    db: AsyncSession = Depends(get_db),
    snapshot: AppointmentSnapshot = Depends(get_snapshot),
) -> ServiceResponse:
    """Partially update service fields."""
    updates = {
        key: value
        for key, value in payload.model_dump(exclude_unset=True).items()
        if value is not None
    }
    try:
        service = await queries.update_service(db, service_id, **updates)
    except RecordNotFoundError as exc:
        raise HTTPException(status_code=404, detail="Service not found") from exc
    await db.commit()
    snapshot.invalidate()
    return _to_service_response(service)


@router.delete("/{service_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_service(
    service_id: int,
    db: AsyncSession = Depends(get_db),
    snapshot: AppointmentSnapshot = Depends(get_snapshot),
) -> Response:
    """Delete a service."""
    try:
        await queries.delete_service(db, service_id)
    except RecordNotFoundError as exc:
        raise HTTPException(status_code=404, detail="Service not found") from exc
    except IntegrityError as exc:
        logger.warning(
            "service_delete_rejected", service_id=service_id, error=str(exc.orig)
        )
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Service is still booked",
        ) from exc
    await db.commit()
    snapshot.invalidate()
    return Response(status_code=status.HTTP_204_NO_CONTENT)
