"""
Supplier master endpoints.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy import select, or_
from sqlalchemy.ext.asyncio import AsyncSession

from roadledger.app.core.redis_client import get_redis
from roadledger.app.db.pagination import paginate, DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
from roadledger.app.db.session import get_db
from roadledger.app.models.supplier import Supplier
from roadledger.app.schemas.party import SupplierCreate, SupplierUpdate, SupplierResponse, SupplierListResponse
from roadledger.app.services.change_notifier import Collection, notify_change
from roadledger.app.services.masters import ensure_unique, get_or_404

router = APIRouter(prefix="/suppliers", tags=["Suppliers"])


@router.get("", response_model=SupplierListResponse)
async def list_suppliers(
    search: Optional[str] = Query(None, description="Matches name, contact person or phone"),
    page: int = Query(1, ge=1),
    page_size: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    db: AsyncSession = Depends(get_db)
):
    """List suppliers ordered by name."""
    query = select(Supplier)
    if search:
        pattern = f"%{search.strip()}%"
        query = query.where(or_(
            Supplier.name.ilike(pattern),
            Supplier.contact.ilike(pattern),
            Supplier.phone.ilike(pattern),
        ))
    suppliers, total = await paginate(db, query.order_by(Supplier.name), page, page_size)
    return SupplierListResponse(
        suppliers=[SupplierResponse.model_validate(s) for s in suppliers],
        total=total,
        page=page,
        page_size=page_size
    )


@router.get("/{supplier_id}", response_model=SupplierResponse)
async def get_supplier(supplier_id: int, db: AsyncSession = Depends(get_db)):
    supplier = await get_or_404(db, Supplier, supplier_id, "Supplier")
    return SupplierResponse.model_validate(supplier)


@router.post("", response_model=SupplierResponse, status_code=status.HTTP_201_CREATED)
async def create_supplier(
    supplier_data: SupplierCreate,
    db: AsyncSession = Depends(get_db),
    redis=Depends(get_redis)
):
    """
    Create a supplier.

    Supplier names are unique; a duplicate name is rejected with 400.
    """
    await ensure_unique(db, Supplier.name, supplier_data.name, "Supplier")
    supplier = Supplier(**supplier_data.model_dump())
    db.add(supplier)
    await db.commit()
    await db.refresh(supplier)

    await notify_change(redis, Collection.SUPPLIERS)
    return SupplierResponse.model_validate(supplier)


@router.put("/{supplier_id}", response_model=SupplierResponse)
async def update_supplier(
    supplier_id: int,
    supplier_data: SupplierUpdate,
    db: AsyncSession = Depends(get_db),
    redis=Depends(get_redis)
):
    supplier = await get_or_404(db, Supplier, supplier_id, "Supplier")
    update_data = supplier_data.model_dump(exclude_unset=True)
    if update_data.get("name"):
        await ensure_unique(db, Supplier.name, update_data["name"], "Supplier", exclude_id=supplier.id)

    for field, value in update_data.items():
        setattr(supplier, field, value)
    await db.commit()
    await db.refresh(supplier)

    await notify_change(redis, Collection.SUPPLIERS)
    return SupplierResponse.model_validate(supplier)


@router.delete("/{supplier_id}")
async def delete_supplier(
    supplier_id: int,
    db: AsyncSession = Depends(get_db),
    redis=Depends(get_redis)
):
    supplier = await get_or_404(db, Supplier, supplier_id, "Supplier")
    await db.delete(supplier)
    await db.commit()

    await notify_change(redis, Collection.SUPPLIERS)
    return {"message": "Supplier deleted successfully", "id": supplier_id}
