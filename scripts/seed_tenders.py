#!/usr/bin/env python3
"""
Seed the tenders table with demo tenders for local development.

Existing rows are matched on reference number and left untouched.

Usage:
    python scripts/seed_tenders.py
    python scripts/seed_tenders.py --reset   # delete demo tenders first
"""

from __future__ import annotations

import argparse
import logging
import sys
from datetime import datetime, timedelta
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from dotenv import load_dotenv
load_dotenv()

from database import SessionLocal, TenderDB, create_tables

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


def demo_tenders(now: datetime) -> list[dict]:
    return [
        {
            "reference_number": "DBKL/2025/ICT/014",
            "title": "Smart City Infrastructure Project",
            "agency": "Kuala Lumpur City Council",
            "category": "Construction",
            "location": "Kuala Lumpur",
            "budget": "RM 12,500,000",
            "closing_date": now + timedelta(days=30),
            "description": (
                "Design and build of smart street lighting, traffic sensors and a central "
                "monitoring centre for the Kuala Lumpur city centre.\n\n"
                "Requirements:\n"
                "- CIDB Grade G6 or higher\n"
                "- Minimum 8 years experience in civil and electrical works\n"
                "- ISO 9001 certification\n"
                "- Valid contractor license"
            ),
            "requirements": [
                "CIDB Grade G6 or higher",
                "Minimum 8 years experience in civil and electrical works",
                "ISO 9001 certification",
                "Valid contractor license",
            ],
            "tags": ["smart city", "infrastructure"],
        },
        {
            "reference_number": "MDEC/2025/DG/003",
            "title": "Digital Government Services Platform",
            "agency": "Malaysia Digital Economy Corporation",
            "category": "IT Services",
            "location": "Cyberjaya",
            "budget": "RM 4,200,000",
            "closing_date": now + timedelta(days=21),
            "description": (
                "Development of a unified citizen services portal with single sign-on, "
                "payments integration and bilingual content management.\n\n"
                "Scope of work includes hosting, support and training for agency staff."
            ),
            "requirements": None,
            "tags": ["digital", "portal"],
        },
        {
            "reference_number": "JKR/2025/SEL/021",
            "title": "Upgrading of Federal Road FT050",
            "agency": "Public Works Department (JKR)",
            "category": "Construction",
            "location": "Selangor",
            "budget": "RM 28,000,000",
            "closing_date": now + timedelta(days=45),
            "description": "Widening and resurfacing of 14km of federal road including drainage works.",
            "requirements": [
                "CIDB Grade G7",
                "At least 10 years of road construction experience",
                "ISO 14001 environmental management",
                "OHSAS 18001 / ISO 45001 safety management",
            ],
            "tags": ["roads"],
        },
        {
            "reference_number": "KKM/2025/MED/008",
            "title": "Supply of Medical Equipment to District Hospitals",
            "agency": "Ministry of Health Malaysia",
            "category": "Supplies",
            "location": "Pahang",
            "budget": "RM 3,100,000",
            "closing_date": now + timedelta(days=14),
            "description": (
                "Supply, delivery and commissioning of patient monitors and infusion pumps.\n\n"
                "1. Registered with the Medical Device Authority\n"
                "2. Minimum 5 years experience supplying hospitals\n"
                "3. ISO 13485 certification"
            ),
            "requirements": None,
            "tags": ["healthcare"],
        },
    ]


def seed(reset: bool = False) -> int:
    create_tables()
    db = SessionLocal()
    created = 0
    try:
        tenders = demo_tenders(datetime.utcnow())
        references = [tender["reference_number"] for tender in tenders]

        if reset:
            deleted = db.query(TenderDB).filter(TenderDB.reference_number.in_(references)).delete(
                synchronize_session=False
            )
            logger.info(f"Deleted {deleted} existing demo tender(s)")

        for data in tenders:
            exists = db.query(TenderDB).filter(TenderDB.reference_number == data["reference_number"]).first()
            if exists:
                logger.info(f"  Skipping {data['reference_number']} (already present)")
                continue
            db.add(TenderDB(**data))
            created += 1
            logger.info(f"  Added {data['reference_number']}: {data['title']}")

        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()

    return created


def main():
    parser = argparse.ArgumentParser(description="Seed demo tenders for local development.")
    parser.add_argument(
        "--reset",
        action="store_true",
        help="Delete the demo tenders before inserting them again",
    )
    args = parser.parse_args()

    created = seed(reset=args.reset)
    logger.info(f"Done. {created} tender(s) created.")


if __name__ == "__main__":
    main()
