"""
scripts/seed.py — Create the schema (optionally) and load demo data.

Every step is idempotent: existing users, facilities and medicines are
matched by their unique email/name and left untouched.

Usage:
    python scripts/seed.py
    python scripts/seed.py --create-schema
    python scripts/seed.py --no-sample-complaint
"""
from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from datetime import date
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from carehub.auth.security import hash_password
from carehub.db.models import Base, Complaint, Facility, Medicine, Priority, Role, User
from carehub.db.session import AsyncSessionLocal, engine
from carehub.services.complaints import ComplaintService
from carehub.services.notifications import NotificationSink

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
)
logger = logging.getLogger(__name__)


USERS = [
    ("admin@medical.com",    "admin123",    "System Admin",     Role.ADMIN),
    ("manager@medical.com",  "manager123",  "Facility Manager", Role.FACILITY_MANAGER),
    ("nurse@medical.com",    "nurse123",    "Nurse Joy",        Role.MEDICAL_STAFF),
    ("resident@medical.com", "resident123", "John Resident",    Role.RESIDENT),
]

FACILITIES = [
    ("Emergency Department", "medical", "Emergency medical services and trauma care", "Building A, Ground Floor"),
    ("Radiology Department", "medical", "X-Ray, CT Scan, MRI services",               "Building B, 2nd Floor"),
    ("Cafeteria",            "general", "Main dining facility",                       "Building C, Ground Floor"),
    ("Parking Lot",          "general", "Patient and visitor parking",                "North Side"),
    ("Laboratory",           "medical", "Blood tests, urinalysis, pathology",         "Building A, 3rd Floor"),
]

MEDICINES = [
    ("Paracetamol 500mg", "Analgesic / antipyretic", 200, "tablets", date(2027, 6, 30), "Pharmacy shelf A1"),
    ("Ibuprofen 400mg",   "Anti-inflammatory",         8, "tablets", date(2027, 1, 31), "Pharmacy shelf A2"),
    ("Amoxicillin 250mg", "Antibiotic",                0, "capsules", None,             "Pharmacy fridge"),
    ("Saline 0.9%",       "IV fluid",                 40, "bags",    date(2026, 12, 31), "Store room"),
]


async def seed_users(session: AsyncSession) -> dict[str, User]:
    seeded: dict[str, User] = {}
    for email, password, name, role in USERS:
        user = await session.scalar(select(User).where(User.email == email))
        if user is None:
            user = User(email=email, hashed_password=hash_password(password), name=name, role=role.value)
            session.add(user)
            logger.info("Created %-16s %s", role.value, email)
        seeded[role.value] = user
    await session.flush()
    return seeded


async def seed_facilities(session: AsyncSession) -> dict[str, Facility]:
    seeded: dict[str, Facility] = {}
    for name, type_, description, location in FACILITIES:
        facility = await session.scalar(select(Facility).where(Facility.name == name))
        if facility is None:
            facility = Facility(name=name, type=type_, description=description, location=location)
            session.add(facility)
            logger.info("Created facility %s", name)
        seeded[name] = facility
    await session.flush()
    return seeded


async def seed_medicines(session: AsyncSession) -> None:
    for name, description, stock, unit, expiry, location in MEDICINES:
        exists = await session.scalar(select(Medicine.id).where(Medicine.name == name))
        if exists is None:
            session.add(
                Medicine(
                    name=name,
                    description=description,
                    stock_level=stock,
                    unit=unit,
                    expiry_date=expiry,
                    location=location,
                )
            )
            logger.info("Created medicine %s (stock %d)", name, stock)
    await session.flush()


async def seed_sample_complaint(session: AsyncSession, resident: User, facility: Facility) -> None:
    existing = await session.scalar(select(func.count()).select_from(Complaint))
    if existing:
        logger.info("Complaints already present (%d); skipping sample complaint", existing)
        return
    complaints = ComplaintService(session, NotificationSink(session))
    await complaints.create(
        title="Broken AC unit in waiting area",
        description=(
            "The air conditioning unit is not working properly, making the "
            "waiting area uncomfortable for patients."
        ),
        facility_id=facility.id,
        created_by_id=resident.id,
        priority=Priority.HIGH,
    )
    logger.info("Sample complaint created")


async def run(create_schema: bool, sample_complaint: bool) -> None:
    if create_schema:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("Schema created")

    async with AsyncSessionLocal() as session:
        users = await seed_users(session)
        facilities = await seed_facilities(session)
        await seed_medicines(session)
        if sample_complaint:
            await seed_sample_complaint(
                session, users[Role.RESIDENT.value], facilities["Emergency Department"]
            )
        await session.commit()

    await engine.dispose()


def main() -> None:
    parser = argparse.ArgumentParser(description="Seed the CareHub database with demo data.")
    parser.add_argument(
        "--create-schema",
        action="store_true",
        help="Create tables directly instead of relying on `alembic upgrade head`.",
    )
    parser.add_argument(
        "--no-sample-complaint",
        dest="sample_complaint",
        action="store_false",
        help="Skip the demo complaint.",
    )
    args = parser.parse_args()

    logger.info("Seeding database | create_schema=%s", args.create_schema)
    asyncio.run(run(args.create_schema, args.sample_complaint))
    logger.info("Seed completed successfully")


if __name__ == "__main__":
    main()
