"""
Sync Pydantic schemas.
"""

from pydantic import BaseModel
from typing import Dict


class ChangeEvent(BaseModel):
    """Payload pushed on the events stream after every mutation."""
    type: str = "data_change"
    collection: str


class CollectionVersionsResponse(BaseModel):
    """Per-collection change counters; a client re-syncs when any counter moves."""
    versions: Dict[str, int]
