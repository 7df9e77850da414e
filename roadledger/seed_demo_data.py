"""
Database seeding script for demo master data.

Creates a party, a supplier, an own and a market vehicle and a fuel wallet
so the back-office has something to book against on a fresh database.
Run this script after the API has started once (tables exist) but before first use.
"""

import asyncio

from sqlalchemy import select

from roadledger.app.db.session import AsyncSessionLocal
from roadledger.app.models.enums import OwnershipType
from roadledger.app.models.fuel_wallet import FuelWallet
from roadledger.app.models.party import Party
from roadledger.app.models.supplier import Supplier
from roadledger.app.models.vehicle import Vehicle


async def seed_demo_data():
    """
    Seed demo masters.

    Creates:
    - 1 party and 1 supplier
    - 1 own vehicle and 1 market vehicle
    - 1 empty fuel wallet
    """
    async with AsyncSessionLocal() as db:
        print("🌱 Starting demo data seeding...")

        result = await db.execute(select(Party).where(Party.name == "Acme Traders"))
        if result.scalar_one_or_none():
            print("ℹ️  Demo data already exists, skipping seeding")
            return

        db.add(Party(name="Acme Traders", contact="R. Mehta", phone="9800000001", gst_number="27AAAAA0000A1Z5"))
        print("✅ Created party Acme Traders")

        db.add(Supplier(name="Sharma Roadlines", contact="V. Sharma", phone="9800000002"))
        print("✅ Created supplier Sharma Roadlines")

        db.add(Vehicle(vehicle_no="MH12AB1234", ownership_type=OwnershipType.OWN, driver_name="Ramesh"))
        db.add(Vehicle(vehicle_no="GJ01XY9999", ownership_type=OwnershipType.MARKET, owner_name="Sharma Roadlines"))
        print("✅ Created vehicles MH12AB1234 (own) and GJ01XY9999 (market)")

        db.add(FuelWallet(name="IOCL Card", balance=0.0))
        print("✅ Created fuel wallet IOCL Card")

        await db.commit()

        print("\n🎉 Demo data seeding completed successfully!")
        print("\nNote: bookings, bills and payments are entered through the API")


if __name__ == "__main__":
    asyncio.run(seed_demo_data())
