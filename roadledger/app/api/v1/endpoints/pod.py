"""
Proof-of-delivery file endpoints.

The list view leaves out file_data; fetch a single file to get its content.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from roadledger.app.core.redis_client import get_redis
from roadledger.app.db.pagination import paginate, DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
from roadledger.app.db.session import get_db
from roadledger.app.models.pod_file import PODFile
from roadledger.app.schemas.pod import PODFileCreate, PODFileUpdate, PODFileMeta, PODFileResponse, PODFileListResponse
from roadledger.app.services.change_notifier import Collection, notify_change
from roadledger.app.services.masters import get_or_404

router = APIRouter(prefix="/pod", tags=["POD"])


@router.get("", response_model=PODFileListResponse)
async def list_pod_files(
    bill_number: Optional[str] = Query(None),
    vehicle_no: Optional[str] = Query(None),
    page: int = Query(1, ge=1),
    page_size: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    db: AsyncSession = Depends(get_db)
):
    query = select(PODFile)
    if bill_number:
        query = query.where(PODFile.bill_number == bill_number)
    if vehicle_no:
        query = query.where(PODFile.vehicle_no == vehicle_no.strip().upper())
    query = query.order_by(PODFile.upload_date.desc(), PODFile.id.desc())
    files, total = await paginate(db, query, page, page_size)
    return PODFileListResponse(
        files=[PODFileMeta.model_validate(f) for f in files],
        total=total,
        page=page,
        page_size=page_size
    )


@router.get("/{file_id}", response_model=PODFileResponse)
async def get_pod_file(file_id: int, db: AsyncSession = Depends(get_db)):
    pod = await get_or_404(db, PODFile, file_id, "POD file")
    return PODFileResponse.model_validate(pod)


@router.post("", response_model=PODFileMeta, status_code=status.HTTP_201_CREATED)
async def upload_pod_file(
    pod_data: PODFileCreate,
    db: AsyncSession = Depends(get_db),
    redis=Depends(get_redis)
):
    pod = PODFile(**pod_data.model_dump())
    db.add(pod)
    await db.commit()
    await db.refresh(pod)

    await notify_change(redis, Collection.POD_FILES)
    return PODFileMeta.model_validate(pod)


@router.put("/{file_id}", response_model=PODFileMeta)
async def update_pod_file(
    file_id: int,
    pod_data: PODFileUpdate,
    db: AsyncSession = Depends(get_db),
    redis=Depends(get_redis)
):
    pod = await get_or_404(db, PODFile, file_id, "POD file")
    for field, value in pod_data.model_dump(exclude_unset=True).items():
        setattr(pod, field, value)
    await db.commit()
    await db.refresh(pod)

    await notify_change(redis, Collection.POD_FILES)
    return PODFileMeta.model_validate(pod)


@router.delete("/{file_id}")
async def delete_pod_file(
    file_id: int,
    db: AsyncSession = Depends(get_db),
    redis=Depends(get_redis)
):
    pod = await get_or_404(db, PODFile, file_id, "POD file")
    await db.delete(pod)
    await db.commit()

    await notify_change(redis, Collection.POD_FILES)
    return {"message": "POD file deleted successfully", "id": file_id}
