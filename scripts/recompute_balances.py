"""
Explicit running-balance recomputation.

Rewrites the cashbook running balances and every ledger scope's balances in
(date, created_at, id) order. Run after back-dated inserts, edits or
deletes when the stored history must be consistent again.
"""

import argparse
import asyncio

from roadledger.app.core.config import settings
from roadledger.app.core.observability import configure_logging
from roadledger.app.db.session import AsyncSessionLocal, engine
from roadledger.app.services import cashbook_service, ledger_service


async def recompute(cashbook: bool, ledgers: bool):
    async with AsyncSessionLocal() as db:
        if cashbook:
            result = await cashbook_service.recompute_cashbook_balances(db)
            print(f"✅ Cashbook: {result['scanned']} entries, {result['updated']} updated, "
                  f"closing balance {result['final_balance']}")
        if ledgers:
            result = await ledger_service.recompute_all_balances(db)
            print(f"✅ Ledgers: {result['scopes']} scopes, {result['scanned']} entries, {result['updated']} updated")
    await engine.dispose()


def main():
    parser = argparse.ArgumentParser(description=__doc__.strip().splitlines()[0])
    parser.add_argument("--cashbook-only", action="store_true", help="Skip the ledger scopes")
    parser.add_argument("--ledgers-only", action="store_true", help="Skip the cashbook")
    args = parser.parse_args()
    if args.cashbook_only and args.ledgers_only:
        parser.error("--cashbook-only and --ledgers-only are exclusive")

    configure_logging(settings.log_level)
    asyncio.run(recompute(cashbook=not args.ledgers_only, ledgers=not args.cashbook_only))


if __name__ == "__main__":
    main()
