"""
Fuel wallet service.

Wallet balances are read-modify-write counters, so every balance change
holds the wallet's lock until its transaction commits.
"""

import logging
from typing import Optional, Tuple

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from roadledger.app.core.exceptions import ResourceNotFoundError, InsufficientWalletBalanceError
from roadledger.app.domain.ledger.posting import fuel_allocation_postings
from roadledger.app.domain.ledger.running_balance import scope_locks, next_balance
from roadledger.app.models.enums import FuelTransactionType, SourceType
from roadledger.app.models.fuel_transaction import FuelTransaction
from roadledger.app.models.fuel_wallet import FuelWallet
from roadledger.app.services import ledger_service

logger = logging.getLogger("roadledger.fuel")


def wallet_scope(name: str) -> str:
    return f"fuel_wallet:{name}"


async def get_wallet(db: AsyncSession, name: str) -> Optional[FuelWallet]:
    result = await db.execute(select(FuelWallet).where(FuelWallet.name == name))
    return result.scalar_one_or_none()


async def credit_wallet(
    db: AsyncSession,
    wallet_name: str,
    amount: float,
    transaction: FuelTransaction,
) -> Tuple[FuelWallet, FuelTransaction]:
    """
    Top up a wallet (creating it when missing) and record the credit.

    The transaction row is built by the caller so top-ups coming from a
    banking entry can carry the banking_entry_id. Commits.
    """
    async with scope_locks.hold(wallet_scope(wallet_name)):
        wallet = await get_wallet(db, wallet_name)
        if wallet is None:
            wallet = FuelWallet(name=wallet_name, balance=0.0)
            db.add(wallet)
            logger.info("Created fuel wallet %s", wallet_name)

        previous = wallet.balance or 0.0
        wallet.balance = next_balance(previous, amount)
        transaction.type = FuelTransactionType.WALLET_CREDIT
        db.add(transaction)
        await db.commit()

    logger.info("Fuel wallet %s credited %s: %s -> %s", wallet_name, amount, previous, wallet.balance)
    await db.refresh(wallet)
    await db.refresh(transaction)
    return wallet, transaction


async def allocate_fuel(db: AsyncSession, transaction: FuelTransaction) -> Tuple[FuelWallet, FuelTransaction]:
    """
    Allocate fuel from an existing wallet to a vehicle.

    Raises:
        ResourceNotFoundError: The wallet does not exist
        InsufficientWalletBalanceError: The wallet cannot cover the amount
    """
    wallet_name = transaction.wallet_name
    scopes = ledger_service.posting_scope_keys(fuel_allocation_postings(transaction))
    async with scope_locks.hold(wallet_scope(wallet_name), *scopes):
        wallet = await get_wallet(db, wallet_name)
        if wallet is None:
            raise ResourceNotFoundError("Fuel wallet", wallet_name)
        if wallet.balance < transaction.amount:
            raise InsufficientWalletBalanceError(wallet_name, wallet.balance, transaction.amount)

        previous = wallet.balance
        wallet.balance = next_balance(previous, -transaction.amount)
        transaction.type = FuelTransactionType.FUEL_ALLOCATION
        db.add(transaction)
        await db.flush()
        await ledger_service.write_source_postings(
            db, SourceType.FUEL, transaction.id, fuel_allocation_postings(transaction)
        )
        await db.commit()

    logger.info(
        "Allocated %s from fuel wallet %s to %s: %s -> %s",
        transaction.amount, wallet_name, transaction.vehicle_no, previous, wallet.balance,
    )

    await db.refresh(wallet)
    await db.refresh(transaction)
    return wallet, transaction


async def delete_fuel_transaction(db: AsyncSession, transaction: FuelTransaction) -> None:
    """
    Delete a fuel transaction and reverse its effect on the wallet.

    Reversing a credit that has already been spent is refused.
    """
    scopes = await ledger_service.source_scope_keys(db, SourceType.FUEL, transaction.id)
    async with scope_locks.hold(wallet_scope(transaction.wallet_name), *scopes):
        wallet = await get_wallet(db, transaction.wallet_name)
        if wallet is not None:
            if transaction.type == FuelTransactionType.WALLET_CREDIT:
                if wallet.balance < transaction.amount:
                    raise InsufficientWalletBalanceError(wallet.name, wallet.balance, transaction.amount)
                wallet.balance = next_balance(wallet.balance, -transaction.amount)
            else:
                wallet.balance = next_balance(wallet.balance, transaction.amount)
        await ledger_service.withdraw_source_entries(db, SourceType.FUEL, transaction.id)
        await db.delete(transaction)
        await db.commit()
