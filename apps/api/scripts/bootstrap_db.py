"""Create database schema and seed sample call logs for development."""
from __future__ import annotations

import asyncio
from datetime import datetime, timedelta, timezone

from app.db.session import SessionLocal, engine
from app.models.base import Base
from app.models.call_log import CallLog, CallPriority, CallStatus, CallType
from app.models.user import User

USERS = [
	{
		"id": "00000000-0000-4000-8000-000000000001",
		"firebase_uid": "seed-front-desk",
		"email": "frontdesk@clinic.example",
		"name": "Front Desk",
	},
	{
		"id": "00000000-0000-4000-8000-000000000002",
		"firebase_uid": "seed-nurse-line",
		"email": "nurse@clinic.example",
		"name": "Nurse Line",
	},
]

CALL_LOGS = [
	{
		"id": "10000000-0000-4000-8000-000000000001",
		"patient_name": "Jane Doe",
		"phone_number": "555-1234",
		"call_type": CallType.INTAKE,
		"status": CallStatus.NEW,
		"priority": CallPriority.MEDIUM,
		"notes": "New patient asking about first visit paperwork.",
		"assigned_to": None,
		"follow_up_needed": False,
		"follow_up_note": None,
		"created_by": USERS[0]["id"],
		"age": timedelta(hours=2),
	},
	{
		"id": "10000000-0000-4000-8000-000000000002",
		"patient_name": "Carlos Rivera",
		"phone_number": "555-8871",
		"call_type": CallType.PHARMACY,
		"status": CallStatus.WAITING_ON_PATIENT,
		"priority": CallPriority.HIGH,
		"notes": "Refill request; pharmacy needs updated insurance card.",
		"assigned_to": USERS[1]["id"],
		"follow_up_needed": True,
		"follow_up_note": "Call back once the card photo arrives.",
		"created_by": USERS[0]["id"],
		"age": timedelta(days=1),
	},
	{
		"id": "10000000-0000-4000-8000-000000000003",
		"patient_name": "Amira Haddad",
		"phone_number": "555-0042",
		"call_type": CallType.REFERRAL,
		"status": CallStatus.ESCALATED,
		"priority": CallPriority.URGENT,
		"notes": "Cardiology referral flagged by patient as time sensitive.",
		"assigned_to": USERS[1]["id"],
		"follow_up_needed": True,
		"follow_up_note": "Confirm specialist received the referral.",
		"created_by": USERS[1]["id"],
		"age": timedelta(days=3),
	},
	{
		"id": "10000000-0000-4000-8000-000000000004",
		"patient_name": "Tom Becker",
		"phone_number": "555-7310",
		"call_type": CallType.BILLING,
		"status": CallStatus.COMPLETED,
		"priority": CallPriority.LOW,
		"notes": None,
		"assigned_to": None,
		"follow_up_needed": False,
		"follow_up_note": None,
		"created_by": USERS[0]["id"],
		"age": timedelta(days=7),
	},
]


async def create_schema() -> None:
	"""Create the database schema if it does not already exist."""

	async with engine.begin() as conn:
		await conn.run_sync(Base.metadata.create_all)


async def seed_users() -> None:
	"""Insert or update demo users."""

	async with SessionLocal() as session:
		async with session.begin():
			for user_data in USERS:
				user = await session.get(User, user_data["id"])
				if user is None:
					session.add(User(**user_data))
				else:
					user.email = user_data["email"]
					user.name = user_data["name"]
					session.add(user)


async def seed_call_logs() -> None:
	"""Insert demo call logs, leaving existing rows untouched."""

	now = datetime.now(timezone.utc)
	async with SessionLocal() as session:
		async with session.begin():
			for log_data in CALL_LOGS:
				if await session.get(CallLog, log_data["id"]) is not None:
					continue
				fields = {key: value for key, value in log_data.items() if key != "age"}
				created_at = now - log_data["age"]
				session.add(CallLog(**fields, created_at=created_at, updated_at=created_at))


async def main() -> None:
	await create_schema()
	await seed_users()
	await seed_call_logs()
	print("Database schema ensured and demo call logs seeded.")


if __name__ == "__main__":
	asyncio.run(main())
