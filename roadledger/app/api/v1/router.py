"""
API v1 Router.

Aggregates all v1 API endpoints.
"""

from fastapi import APIRouter
from roadledger.app.api.v1.endpoints import (
    parties, suppliers, vehicles,
    loading_slips, memos, bills,
    banking, cashbook, fuel,
    party_commission_ledger, pod, ledgers,
    documents, events, sync,
)

router = APIRouter()

# Masters
router.include_router(parties.router)
router.include_router(suppliers.router)
router.include_router(vehicles.router)

# Trip documents
router.include_router(loading_slips.router)
router.include_router(memos.router)
router.include_router(bills.router)
router.include_router(pod.router)

# Money movements
router.include_router(banking.router)
router.include_router(cashbook.router)
router.include_router(fuel.router)
router.include_router(party_commission_ledger.router)
router.include_router(ledgers.router)

# Reports
router.include_router(documents.router)

# Client sync
router.include_router(events.router)
router.include_router(sync.router)
