import asyncio
import sys
import os

# Add the project root to sys.path so we can import leave_portal
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from leave_portal.db import AsyncSessionLocal, init_db, close_db
from leave_portal.services.seed import run_seed_admin, ADMIN_EMAIL, ADMIN_EMPLOYEE_CODE


async def seed_admin():
    """Create tables if needed and seed the first admin account."""
    try:
        await init_db()
        print("Database connection initialized")

        async with AsyncSessionLocal() as db:
            created = await run_seed_admin(db)
            await db.commit()

        if created:
            print("Admin created successfully!")
            print(f"   Email: {ADMIN_EMAIL}")
            print(f"   Employee ID: {ADMIN_EMPLOYEE_CODE}")
            print("   Password: value of SEED_ADMIN_PASSWORD (default Admin@123)")
        else:
            print(f"Admin {ADMIN_EMAIL} already exists.")
    finally:
        await close_db()

if __name__ == "__main__":
    asyncio.run(seed_admin())
