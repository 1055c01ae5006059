#!/usr/bin/env python3
"""
Script to reset the database by removing all donor and request data.
This will delete:
- All credit transactions
- All request responses
- All donations
- All blood requests
- All donor profiles

This script preserves:
- User accounts

⚠️  WARNING: This is a destructive operation that cannot be undone!

Usage: python scripts/reset_database.py
       python scripts/reset_database.py --confirm  # Skip confirmation prompt
"""
import sys
import os
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from pulseconnect.database.database import SessionLocal
from pulseconnect.models import CreditTransaction, RequestResponse, Donation, BloodRequest, Donor


# Children before parents so foreign keys never dangle
DELETE_ORDER = [
    ("Credit transactions", CreditTransaction),
    ("Request responses", RequestResponse),
    ("Donations", Donation),
    ("Blood requests", BloodRequest),
    ("Donors", Donor),
]


def reset_database(skip_confirmation: bool = False):
    """
    Delete all donor and request data in a single transaction.

    Args:
        skip_confirmation: If True, skip the confirmation prompt
    """
    db = SessionLocal()

    try:
        counts = {label: db.query(model).count() for label, model in DELETE_ORDER}

        print("=" * 60)
        print("DATABASE RESET - Current Data Summary")
        print("=" * 60)
        for label, count in counts.items():
            print(f"{label + ':':<27}{count}")
        print("=" * 60)

        if not any(counts.values()):
            print("✅ Database is already empty. Nothing to reset.")
            return

        if not skip_confirmation:
            print("\n⚠️  WARNING: This will PERMANENTLY DELETE all donors, requests and credits!")
            print("   User accounts are preserved.")
            response = input("\n   Are you absolutely sure you want to proceed? (type 'RESET' to confirm): ")
            if response != "RESET":
                print("❌ Operation cancelled")
                return

        for label, model in DELETE_ORDER:
            deleted = db.query(model).delete(synchronize_session=False)
            print(f"   ✓ Deleted {deleted} row(s) from {label.lower()}")

        db.commit()
        print("\n✅ Database reset complete")

    except Exception as e:
        db.rollback()
        print(f"\n❌ Error during reset, all changes rolled back: {e}")
        raise
    finally:
        db.close()


if __name__ == "__main__":
    reset_database(skip_confirmation="--confirm" in sys.argv)
