import asyncio
import asyncpg
import os
import sys
from dotenv import load_dotenv

from app.database.schema import init_schema

load_dotenv()

async def create_schema():
    url = os.getenv('DATABASE_URL')
    if not url:
        print("❌ DATABASE_URL is not set")
        return False

    conn = await asyncpg.connect(url)

    try:
        print("Creating newsletter tables...")
        await init_schema(conn)
        print("✓ subscribers table ready")
        print("✓ newsletters table ready")
        print("\n✅ Schema created successfully!")
        return True
    except Exception as e:
        print(f"❌ Error: {e}")
        return False
    finally:
        await conn.close()

if __name__ == "__main__":
    success = asyncio.run(create_schema())
    sys.exit(0 if success else 1)
