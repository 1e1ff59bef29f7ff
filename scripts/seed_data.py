"""
Seed an admin, a BDP with one DDP, and a few approved vendors.
Run: python -m scripts.seed_data
"""
import asyncio
import os
import sys

# Add parent so we can import the app modules
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from sqlalchemy import select

from database import AsyncSessionLocal, init_db
from models import Partner, Vendor
from models.enums import PartnerStatus, Role, VendorStatus, VendorType


PARTNERS_DATA = [
    {
        "id": "admin",
        "username": "admin",
        "name": "Platform Admin",
        "role": Role.ADMIN,
        "state": "Odisha",
    },
    {
        "id": "bdp-odisha",
        "username": "bdp.odisha",
        "name": "Kalinga Solar Partners",
        "role": Role.BDP,
        "state": "Odisha",
        "district": "Khordha",
    },
    {
        "id": "ddp-bhubaneswar",
        "username": "ddp.bhubaneswar",
        "name": "Bhubaneswar Rooftop Solutions",
        "role": Role.DDP,
        "state": "Odisha",
        "district": "Khordha",
        "parent_id": "bdp-odisha",
    },
]

VENDORS_DATA = [
    {
        "id": "vnd-discom-odisha",
        "vendor_code": "VND-DSC001",
        "name": "TPCODL Net Metering Services",
        "vendor_type": VendorType.DISCOM_NET_METERING,
        "phone": "9000000001",
        "state": "Odisha",
    },
    {
        "id": "vnd-discom-bihar",
        "vendor_code": "VND-DSC002",
        "name": "Patna Net Meter Liaison",
        "vendor_type": VendorType.DISCOM_NET_METERING,
        "phone": "9000000002",
        "state": "Bihar",
    },
    {
        "id": "vnd-bank-odisha",
        "vendor_code": "VND-BNK001",
        "name": "Utkal Solar Loan Desk",
        "vendor_type": VendorType.BANK_LOAN_LIAISON,
        "phone": "9000000003",
        "state": "Odisha",
    },
    {
        "id": "vnd-install-odisha",
        "vendor_code": "VND-INS001",
        "name": "Coastal Solar Installers",
        "vendor_type": VendorType.SOLAR_INSTALLATION,
        "phone": "9000000004",
        "state": "Odisha",
    },
]


async def seed():
    await init_db()
    async with AsyncSessionLocal() as session:
        for data in PARTNERS_DATA:
            if await session.get(Partner, data["id"]):
                print(f"Partner {data['id']} already exists, skipping")
                continue
            session.add(Partner(
                id=data["id"],
                username=data["username"],
                name=data["name"],
                role=data["role"].value,
                state=data.get("state"),
                district=data.get("district"),
                parent_id=data.get("parent_id"),
                status=PartnerStatus.APPROVED.value,
            ))
            # Children reference the parent row
            await session.flush()
            print(f"Seeded partner: {data['name']} ({data['role'].value})")

        for data in VENDORS_DATA:
            existing = await session.execute(select(Vendor).where(Vendor.id == data["id"]))
            if existing.scalar_one_or_none():
                print(f"Vendor {data['id']} already exists, skipping")
                continue
            session.add(Vendor(
                id=data["id"],
                vendor_code=data["vendor_code"],
                name=data["name"],
                vendor_type=data["vendor_type"].value,
                phone=data["phone"],
                state=data["state"],
                status=VendorStatus.APPROVED.value,
            ))
            print(f"Seeded vendor: {data['name']}")
        await session.commit()
    print("Seed complete.")


if __name__ == "__main__":
    asyncio.run(seed())
