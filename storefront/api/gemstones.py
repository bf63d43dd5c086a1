import logging
from uuid import UUID
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.exc import IntegrityError
from storefront.api.deps import get_catalog
from storefront.exceptions import NotFoundError
from storefront.schemas.gemstone import GemstoneCreate, GemstoneResponse, GemstoneUpdate
from storefront.services.catalog import GemstoneCatalog

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/gemstones/{gemstone_id}", response_model=GemstoneResponse)
async def get_gemstone(
    gemstone_id: UUID,
    catalog: GemstoneCatalog = Depends(get_catalog)
):
    """
    Get a single gemstone by its ID.
    """
    try:
        gemstone = await catalog.get(gemstone_id)
    except NotFoundError:
        raise HTTPException(status_code=404, detail="Gemstone not found")
    return GemstoneResponse.from_model(gemstone)


@router.post("/gemstones", response_model=GemstoneResponse, status_code=201)
async def create_gemstone(
    data: GemstoneCreate,
    catalog: GemstoneCatalog = Depends(get_catalog)
):
    """
    Create a gemstone. Its search vectors are built in the same transaction.
    """
    try:
        gemstone = await catalog.create(data)
    except IntegrityError:
        await catalog.db.rollback()
        raise HTTPException(status_code=409, detail=f"Serial number {data.serial_number} already exists")
    return GemstoneResponse.from_model(gemstone)


@router.patch("/gemstones/{gemstone_id}", response_model=GemstoneResponse)
async def update_gemstone(
    gemstone_id: UUID,
    data: GemstoneUpdate,
    catalog: GemstoneCatalog = Depends(get_catalog)
):
    """
    Update gemstone fields. Search vectors are rebuilt when a searchable field changes.
    """
    try:
        gemstone = await catalog.update(gemstone_id, data)
    except NotFoundError:
        raise HTTPException(status_code=404, detail="Gemstone not found")
    except IntegrityError:
        await catalog.db.rollback()
        raise HTTPException(status_code=409, detail="Serial number already exists")
    return GemstoneResponse.from_model(gemstone)
