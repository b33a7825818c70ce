# main.py
import asyncio
import logging
from fitstore.app import StoreApp
from fitstore.config import setup_logging

async def main():
    # Setup logging
    setup_logging()
    logger = logging.getLogger(__name__)

    try:
        # Initialize and start the HTTP service
        store = StoreApp()
        logger.info("Starting store...")
        await store.start()
    except Exception as e:
        logger.error(f"Error starting store: {e}", exc_info=True)
        raise

if __name__ == "__main__":
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        pass
