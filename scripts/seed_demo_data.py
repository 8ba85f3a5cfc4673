#!/usr/bin/env python3
"""Seed the local database with demo committees, users and receipts.

Usage:
    python scripts/seed_demo_data.py

Every demo account uses the password "demo123". Re-running the script is
safe: committees and users are upserted, receipts already on file are skipped.
"""

from dotenv import load_dotenv

load_dotenv()

from amc_receipts.models.committee import Committee
from amc_receipts.repositories.local_backend import LocalBackend
from amc_receipts.repositories.receipt_repository import DuplicateReceiptError

DEMO_PASSWORD = "demo123"
DISTRICT = "East Godavari"

COMMITTEES = [
    Committee(id="c-tuni", name="Tuni Agricultural Market Committee", district=DISTRICT, code="TUN"),
    Committee(id="c-kakinada", name="Kakinada Agricultural Market Committee", district=DISTRICT, code="KKD"),
    Committee(id="c-rajahmundry", name="Rajahmundry Agricultural Market Committee", district=DISTRICT, code="RJY"),
    Committee(id="c-amalapuram", name="Amalapuram Agricultural Market Committee", district=DISTRICT, code="AMP"),
]

USERS = [
    {"login_id": "deo", "role": "DEO", "display_name": "Data Entry Operator", "committee": "Tuni AMC"},
    {"login_id": "officer", "role": "Officer", "display_name": "Checkpost Officer", "committee": "Tuni AMC"},
    {"login_id": "supervisor", "role": "Supervisor", "display_name": "Committee Supervisor", "committee": "Tuni AMC"},
    {"login_id": "jd", "role": "JD", "display_name": "Joint Director", "committee": None},
]

# (date, trader, commodity, quantity, value, counterparty committee)
RECEIPTS = [
    ("2024-06-10", "Rajesh Kumar", "Rice", 500, 250000, "c-kakinada"),
    ("2024-06-08", "Suresh Reddy", "Cotton", 300, 180000, "c-rajahmundry"),
    ("2024-06-07", "Rajesh Kumar", "Wheat", 200, 120000, "c-kakinada"),
    ("2024-06-05", "Priya Sharma", "Jowar", 400, 160000, "c-amalapuram"),
    ("2024-06-03", "Mohan Rao", "Maize", 600, 300000, "c-kakinada"),
    ("2024-06-01", "Suresh Reddy", "Rice", 350, 175000, "c-rajahmundry"),
    ("2024-05-28", "Lakshmi Devi", "Gram", 250, 200000, "c-amalapuram"),
]


def main():
    backend = LocalBackend()
    print(f"Database: {backend.users.db_path}")

    backend.committees.upsert_committees(COMMITTEES)
    print(f"Committees: {len(COMMITTEES)}")

    user_ids = {}
    for user_data in USERS:
        user = backend.users.upsert_user(
            login_id=user_data["login_id"],
            plain_password=DEMO_PASSWORD,
            role=user_data["role"],
            display_name=user_data["display_name"],
            committee=user_data["committee"],
        )
        user_ids[user.login_id] = str(user.user_id)
        print(f"  {user.login_id:12s} | {user.role.value:10s} | {user.committee or '-'}")

    created = 0
    for number, (date, trader, commodity, quantity, value, counterparty) in enumerate(RECEIPTS, start=1):
        payload = {
            "date": date,
            "committee_id": "c-tuni",
            "counterparty_committee_id": counterparty,
            "trader_name": trader,
            "payee_name": f"{trader} & Sons",
            "book_number": "B-001",
            "receipt_number": f"{number:04d}",
            "commodity": commodity,
            "quantity": quantity,
            "value": value,
            "fees_paid": round(value * 0.01, 2),
            "created_by": user_ids["deo"],
            "collected_by": "Data Entry Operator",
            "checkpost": "Tuni Checkpost",
        }
        try:
            backend.receipts.insert_receipt(payload)
            created += 1
        except DuplicateReceiptError:
            continue

    print(f"Receipts: {created} new, {len(RECEIPTS) - created} already present")
    print(f"Demo password for all accounts: {DEMO_PASSWORD}")


if __name__ == "__main__":
    main()
