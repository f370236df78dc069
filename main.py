# main.py
import asyncio
import logging
from eniqilo_store.database import Database
from eniqilo_store.config import setup_logging

async def main():
    # Setup logging
    setup_logging()
    logger = logging.getLogger(__name__)

    db = Database()
    try:
        # Connecting applies any pending migrations
        logger.info("Applying database migrations...")
        await db.connect()
    except Exception as e:
        logger.error(f"Error preparing database: {e}", exc_info=True)
        raise
    finally:
        await db.close()

if __name__ == "__main__":
    asyncio.run(main())
