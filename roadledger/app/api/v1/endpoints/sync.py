"""
Collection version endpoint for polling clients.
"""

from fastapi import APIRouter, Depends

from roadledger.app.core.redis_client import get_redis
from roadledger.app.schemas.sync import CollectionVersionsResponse
from roadledger.app.services.change_notifier import get_collection_versions

router = APIRouter(prefix="/sync", tags=["Sync"])


@router.get("/versions", response_model=CollectionVersionsResponse)
async def collection_versions(redis=Depends(get_redis)):
    """Change counter per collection. Counters only grow; a moved counter means re-fetch."""
    return CollectionVersionsResponse(versions=await get_collection_versions(redis))
