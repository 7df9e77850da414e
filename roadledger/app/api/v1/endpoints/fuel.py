"""
Fuel wallet and fuel allocation endpoints.
"""

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from roadledger.app.core.exceptions import BusinessRuleError
from roadledger.app.core.redis_client import get_redis
from roadledger.app.db.pagination import paginate, DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
from roadledger.app.db.session import get_db
from roadledger.app.models.enums import FuelTransactionType
from roadledger.app.models.fuel_transaction import FuelTransaction
from roadledger.app.models.fuel_wallet import FuelWallet
from roadledger.app.schemas.fuel import (
    FuelWalletCreate,
    FuelWalletResponse,
    FuelWalletListResponse,
    FuelTransactionCreate,
    FuelTransactionUpdate,
    FuelTransactionResponse,
    FuelTransactionListResponse,
    FuelAllocationCreate,
    FuelAllocationResponse,
)
from roadledger.app.services import fuel_service
from roadledger.app.services.change_notifier import Collection, notify_change
from roadledger.app.services.masters import ensure_unique, get_or_404

router = APIRouter(prefix="/fuel", tags=["Fuel"])

FUEL_COLLECTIONS = (Collection.FUEL_WALLETS, Collection.FUEL_TRANSACTIONS)


@router.get("/wallets", response_model=FuelWalletListResponse)
async def list_wallets(
    page: int = Query(1, ge=1),
    page_size: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    db: AsyncSession = Depends(get_db)
):
    wallets, total = await paginate(db, select(FuelWallet).order_by(FuelWallet.name), page, page_size)
    return FuelWalletListResponse(
        wallets=[FuelWalletResponse.model_validate(w) for w in wallets],
        total=total,
        page=page,
        page_size=page_size
    )


@router.get("/wallets/{wallet_id}", response_model=FuelWalletResponse)
async def get_wallet(wallet_id: int, db: AsyncSession = Depends(get_db)):
    wallet = await get_or_404(db, FuelWallet, wallet_id, "Fuel wallet")
    return FuelWalletResponse.model_validate(wallet)


@router.post("/wallets", response_model=FuelWalletResponse, status_code=status.HTTP_201_CREATED)
async def create_wallet(
    wallet_data: FuelWalletCreate,
    db: AsyncSession = Depends(get_db),
    redis=Depends(get_redis)
):
    await ensure_unique(db, FuelWallet.name, wallet_data.name, "Fuel wallet")
    wallet = FuelWallet(**wallet_data.model_dump())
    db.add(wallet)
    await db.commit()
    await db.refresh(wallet)

    await notify_change(redis, Collection.FUEL_WALLETS)
    return FuelWalletResponse.model_validate(wallet)


@router.get("/transactions", response_model=FuelTransactionListResponse)
async def list_transactions(
    wallet_name: Optional[str] = Query(None),
    vehicle_no: Optional[str] = Query(None),
    transaction_type: Optional[FuelTransactionType] = Query(None, alias="type"),
    date_from: Optional[date] = Query(None),
    date_to: Optional[date] = Query(None),
    page: int = Query(1, ge=1),
    page_size: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    db: AsyncSession = Depends(get_db)
):
    query = select(FuelTransaction)
    if wallet_name:
        query = query.where(FuelTransaction.wallet_name == wallet_name)
    if vehicle_no:
        query = query.where(FuelTransaction.vehicle_no == vehicle_no.strip().upper())
    if transaction_type:
        query = query.where(FuelTransaction.type == transaction_type)
    if date_from:
        query = query.where(FuelTransaction.date >= date_from)
    if date_to:
        query = query.where(FuelTransaction.date <= date_to)
    query = query.order_by(FuelTransaction.date.desc(), FuelTransaction.created_at.desc(), FuelTransaction.id.desc())
    transactions, total = await paginate(db, query, page, page_size)
    return FuelTransactionListResponse(
        transactions=[FuelTransactionResponse.model_validate(t) for t in transactions],
        total=total,
        page=page,
        page_size=page_size
    )


@router.get("/transactions/{transaction_id}", response_model=FuelTransactionResponse)
async def get_transaction(transaction_id: int, db: AsyncSession = Depends(get_db)):
    transaction = await get_or_404(db, FuelTransaction, transaction_id, "Fuel transaction")
    return FuelTransactionResponse.model_validate(transaction)


@router.post("/transactions", response_model=FuelTransactionResponse, status_code=status.HTTP_201_CREATED)
async def create_transaction(
    transaction_data: FuelTransactionCreate,
    db: AsyncSession = Depends(get_db),
    redis=Depends(get_redis)
):
    """
    Record a wallet credit or a fuel allocation.

    Credits create the wallet when missing. Allocations need an existing
    wallet (404) with enough balance (400).
    """
    transaction = FuelTransaction(**transaction_data.model_dump())
    if transaction_data.type == FuelTransactionType.WALLET_CREDIT:
        _, transaction = await fuel_service.credit_wallet(db, transaction.wallet_name, transaction.amount, transaction)
        await notify_change(redis, *FUEL_COLLECTIONS)
    else:
        if not transaction.vehicle_no:
            raise BusinessRuleError("vehicle_no is required for a fuel allocation")
        _, transaction = await fuel_service.allocate_fuel(db, transaction)
        await notify_change(redis, *FUEL_COLLECTIONS, Collection.LEDGER_ENTRIES)
    return FuelTransactionResponse.model_validate(transaction)


@router.post("/allocate", response_model=FuelAllocationResponse, status_code=status.HTTP_201_CREATED)
async def allocate_fuel(
    allocation: FuelAllocationCreate,
    db: AsyncSession = Depends(get_db),
    redis=Depends(get_redis)
):
    """Allocate fuel to a vehicle, debit the wallet and post a vehicle fuel expense."""
    fields = allocation.model_dump()
    fields["narration"] = fields.get("narration") or f"Fuel allocated to {allocation.vehicle_no}"
    wallet, transaction = await fuel_service.allocate_fuel(db, FuelTransaction(**fields))
    await notify_change(redis, *FUEL_COLLECTIONS, Collection.LEDGER_ENTRIES)
    return FuelAllocationResponse(
        transaction=FuelTransactionResponse.model_validate(transaction),
        wallet=FuelWalletResponse.model_validate(wallet),
    )


@router.put("/transactions/{transaction_id}", response_model=FuelTransactionResponse)
async def update_transaction(
    transaction_id: int,
    transaction_data: FuelTransactionUpdate,
    db: AsyncSession = Depends(get_db),
    redis=Depends(get_redis)
):
    transaction = await get_or_404(db, FuelTransaction, transaction_id, "Fuel transaction")
    for field, value in transaction_data.model_dump(exclude_unset=True).items():
        setattr(transaction, field, value)
    await db.commit()
    await db.refresh(transaction)

    await notify_change(redis, Collection.FUEL_TRANSACTIONS)
    return FuelTransactionResponse.model_validate(transaction)


@router.delete("/transactions/{transaction_id}")
async def delete_transaction(
    transaction_id: int,
    db: AsyncSession = Depends(get_db),
    redis=Depends(get_redis)
):
    """Delete a transaction and reverse its effect on the wallet balance."""
    transaction = await get_or_404(db, FuelTransaction, transaction_id, "Fuel transaction")
    await fuel_service.delete_fuel_transaction(db, transaction)
    await notify_change(redis, *FUEL_COLLECTIONS, Collection.LEDGER_ENTRIES)
    return {"message": "Fuel transaction deleted successfully", "id": transaction_id}
