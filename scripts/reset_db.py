#!/usr/bin/env python3
"""
Script to reset the local development database.
Deletes the SQLite file and creates a fresh, fully migrated schema.
"""

import asyncio
import sys

from tasknotes.core.config import settings
from tasknotes.core.database import build_engine, init_db
from tasknotes.core.logging import configure_logging
from tasknotes.services.schema import schema_manager


async def reset_database(recreate: bool = True) -> bool:
    """Delete the database and optionally recreate the schema."""
    print(f"Resetting database: {settings.DATABASE_URL}")

    engine = build_engine()
    try:
        removed = await schema_manager.reset(engine)
        print("✅ Deleted database file" if removed else "No database file to delete")

        if recreate:
            # reset() disposed the pool; the engine reconnects on demand
            version = await init_db(engine)
            print(f"✅ Schema created at version {version}")
    except Exception as e:
        print(f"❌ Error resetting database: {e}")
        return False
    finally:
        await engine.dispose()

    return True


if __name__ == "__main__":
    configure_logging()
    recreate = not (len(sys.argv) > 1 and sys.argv[1] == "delete")
    ok = asyncio.run(reset_database(recreate=recreate))
    sys.exit(0 if ok else 1)
