#!/usr/bin/env python3
"""
Script to verify that the expense tables exist and the migration is applied
Usage: python verify_migration.py
"""
import asyncio
import sys
from sqlalchemy import inspect, text
from expense_tracker.core.config import get_settings
from expense_tracker.core.database import Database

EXPECTED_TABLES = ("users", "categories", "transactions")

async def verify_database(db: Database) -> bool:
    """Check tables, migration status and row counts; returns True when all tables exist"""
    async with db.engine.connect() as conn:
        print(f"🔗 Connected to {conn.dialect.name} database")

        tables = await conn.run_sync(lambda sync_conn: inspect(sync_conn).get_table_names())

        print("\n📋 Tables in your database:")
        missing = [name for name in EXPECTED_TABLES if name not in tables]
        for name in EXPECTED_TABLES:
            print(f"   {'✅' if name in tables else '❌'} {name}")

        print("\n🔄 Migration status:")
        if "alembic_version" in tables:
            result = await conn.execute(text("SELECT version_num FROM alembic_version"))
            version = result.scalar_one_or_none()
            print(f"   ✅ Current Alembic version: {version}" if version else "   ⚠️  No Alembic version found")
        else:
            print("   ⚠️  alembic_version table not found (tables created without migrations?)")

        print("\n📊 Table statistics:")
        for name in EXPECTED_TABLES:
            if name in tables:
                count = (await conn.execute(text(f"SELECT COUNT(*) FROM {name}"))).scalar_one()
                print(f"   📈 {name}: {count} rows")

    return not missing

async def main() -> int:
    db = Database.from_settings(get_settings())
    try:
        ok = await verify_database(db)
    except Exception as e:
        print(f"❌ Database connection failed: {str(e)}")
        return 1
    finally:
        # Properly dispose of the engine
        await db.dispose()

    print("\n✅ Database verification completed successfully!" if ok else "\n❌ Some tables are missing")
    return 0 if ok else 1

if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
