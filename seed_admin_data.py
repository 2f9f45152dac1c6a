#!/usr/bin/env python3
"""
Admin Seed Data Script

Creates the platform super admin and, optionally, a demo agency with an
agency admin, a branch and a client so bookings can be created right away.

Usage:
    python seed_admin_data.py [--demo]
"""

import sys

from sqlalchemy import text
from sqlalchemy.orm import Session

from voyage.auth.dependencies import ADMIN, SUPER_ADMIN
from voyage.auth.utils import get_password_hash
from voyage.database import Base, SessionLocal, engine
from voyage.models import Agency, Branch, Client, User

SUPER_ADMIN_EMAIL = "superadmin@voyagecentral.com"
SUPER_ADMIN_PASSWORD = "Admin123!"
DEMO_ADMIN_EMAIL = "admin@demo-travels.com"
DEMO_ADMIN_PASSWORD = "Demo123!"

def create_super_admin(db: Session):
    """Create the platform super admin"""
    print("🔧 Creating super admin...")

    if db.query(User).filter(User.email == SUPER_ADMIN_EMAIL).first():
        print("✅ Super admin already exists, skipping...")
        return

    db.add(User(
        name="Platform Super Administrator",
        email=SUPER_ADMIN_EMAIL,
        password=get_password_hash(SUPER_ADMIN_PASSWORD),
        role=SUPER_ADMIN,
    ))
    db.commit()
    print(f"✅ Created super admin: {SUPER_ADMIN_EMAIL} / {SUPER_ADMIN_PASSWORD}")

def create_demo_agency(db: Session):
    """Create a demo agency with an admin, a branch and a client"""
    print("🏢 Creating demo agency...")

    if db.query(User).filter(User.email == DEMO_ADMIN_EMAIL).first():
        print("✅ Demo agency already exists, skipping...")
        return

    agency = Agency(
        business_name="Demo Travels",
        address_line1="12 MG Road",
        city="Bengaluru",
        state="Karnataka",
        pincode="560001",
        contact_person_name="Demo Owner",
        contact_person_email="owner@demo-travels.com",
        contact_person_phone="9800000000",
    )
    branch = Branch(branch_name="Head Office", address="12 MG Road")
    agency.branches.append(branch)
    db.add(agency)
    db.flush()

    db.add(User(
        name="Demo Agency Admin",
        email=DEMO_ADMIN_EMAIL,
        password=get_password_hash(DEMO_ADMIN_PASSWORD),
        role=ADMIN,
        agency_id=agency.id,
        branch_id=branch.id,
    ))
    db.add(Client(agency_id=agency.id, client_name="Asha Rao", email="asha@example.com", mobile="9811111111"))
    db.commit()
    print(f"✅ Created demo agency (branch id {branch.id}): {DEMO_ADMIN_EMAIL} / {DEMO_ADMIN_PASSWORD}")

def verify_database_connection(db: Session) -> bool:
    """Verify database connection"""
    print("🔌 Verifying database connection...")
    try:
        db.execute(text("SELECT 1"))
        print("✅ Database connection successful")
        return True
    except Exception as e:
        print(f"❌ Database connection failed: {e}")
        return False

def main(argv=None):
    """Main seeding function"""
    argv = sys.argv[1:] if argv is None else argv
    print("🚀 Starting data seeding...")
    print("=" * 50)

    Base.metadata.create_all(bind=engine)
    db = SessionLocal()

    try:
        if not verify_database_connection(db):
            print("❌ Aborting due to database connection issues")
            return False

        create_super_admin(db)
        if "--demo" in argv:
            create_demo_agency(db)

        print("=" * 50)
        print("✅ Data seeding completed successfully!")
        print("🌐 Log in at POST /api/v1/auth/login")
        return True

    except Exception as e:
        print(f"❌ Error during seeding: {e}")
        db.rollback()
        return False

    finally:
        db.close()

if __name__ == "__main__":
    success = main()
    sys.exit(0 if success else 1)
