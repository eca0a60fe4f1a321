"""Clients API endpoints."""

from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from pydantic import BaseModel, Field
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from salon.api.deps import get_db, get_snapshot
from salon.core.logging import get_logger
from salon.models.client import Client
from salon.scheduling.snapshot import AppointmentSnapshot
from salon.store import queries
from salon.store.queries import RecordNotFoundError

logger = get_logger(__name__)

router = APIRouter(prefix="/api/clients", tags=["clients"])


class ClientCreateRequest(BaseModel):
    """Payload for creating a client."""

    first_name: str = Field(max_length=100)
    last_name: str = Field(max_length=100)
    phone: str = Field(max_length=50)


class ClientUpdateRequest(BaseModel):
    """Payload for updating a client."""

    first_name: str | None = Field(default=None, max_length=100)
    last_name: str | None = Field(default=None, max_length=100)
    phone: str | None = Field(default=None, max_length=50)


class ClientResponse(BaseModel):
    """Client response model."""

    id: int
    first_name: str
    last_name: str
    phone: str
    created_at: datetime
    updated_at: datetime | None


class ClientListResponse(BaseModel):
    """Client list response."""

    items: list[ClientResponse]
    total: int


def _to_client_response(client: Client) -> ClientResponse:
    """Map SQLAlchemy client model to response model."""
    return ClientResponse(
        id=client.id,
        first_name=client.first_name,
        last_name=client.last_name,
        phone=client.phone,
        created_at=client.created_at,
        updated_at=client.updated_at,
    )


@router.post("", response_model=ClientResponse, status_code=status.HTTP_201_CREATED)
async def create_client(
    payload: ClientCreateRequest,
    db: AsyncSession = Depends(get_db),
) -> ClientResponse:
    """Create a new client."""
    client = await queries.create_client(db, **payload.model_dump())
    return _to_client_response(client)


@router.get("", response_model=ClientListResponse)
async def list_clients(
    search: str | None = Query(default=None, min_length=1),
    db: AsyncSession = Depends(get_db),
) -> ClientListResponse:
    """List clients in creation order, optionally filtered by name or phone."""
    clients = await queries.list_clients(db, search=search)
    return ClientListResponse(
        items=[_to_client_response(client) for client in clients],
        total=len(clients),
    )


@router.get("/{client_id}", response_model=ClientResponse)
async def get_client(
    client_id: int,
    db: AsyncSession = Depends(get_db),
) -> ClientResponse:
    """Get client by ID."""
    try:
        client = await queries.get_client(db, client_id)
    except RecordNotFoundError as exc:
        raise HTTPException(status_code=404, detail="Client not found") from exc
    return _to_client_response(client)


@router.patch("/{client_id}", response_model=ClientResponse)
async def update_client(
    client_id: int,
    payload: ClientUpdateRequest,
    db: AsyncSession = Depends(get_db),
    snapshot: AppointmentSnapshot = Depends(get_snapshot),
) -> ClientResponse:
    """Partially update client fields."""
    updates = {
        key: value
        for key, value in payload.model_dump(exclude_unset=True).items()
        if value is not None
    }
    try:
        client = await queries.update_client(db, client_id, **updates)
    except RecordNotFoundError as exc:
        raise HTTPException(status_code=404, detail="Client not found") from exc
    await db.commit()
    snapshot.invalidate()
    return _to_client_response(client)


@router.delete("/{client_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_client(
    client_id: int,
    db: AsyncSession = Depends(get_db),
    snapshot: AppointmentSnapshot = Depends(get_snapshot),
) -> Response:
    """Delete a client."""
    try:
        await queries.delete_client(db, client_id)
    except RecordNotFoundError as exc:
        raise HTTPException(status_code=404, detail="Client not found") from exc
    except IntegrityError as exc:
        logger.warning("client_delete_rejected", client_id=client_id, error=str(exc.orig))
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Client still has appointments",
        ) from exc
    await db.commit()
    snapshot.invalidate()
    return Response(status_code=status.HTTP_204_NO_CONTENT)
