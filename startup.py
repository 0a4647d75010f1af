#!/usr/bin/env python3
"""
Development entry point: run the API under uvicorn.

Production deployments use gunicorn with ``gunicorn.conf.py``:
    gunicorn -c gunicorn.conf.py hospitalrecords.app:app
"""

import logging
import os
import sys

import uvicorn

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=[logging.StreamHandler(sys.stdout)]
)
logger = logging.getLogger(__name__)

# Add the src directory to Python path
current_dir = os.path.dirname(os.path.abspath(__file__))
src_path = os.path.join(current_dir, 'src')
sys.path.insert(0, src_path)


def main():
    from hospitalrecords.core.config import get_settings

    settings = get_settings()
    port = int(os.environ.get("PORT", settings.port))
    mongo_uri = '✅ set' if os.environ.get('MONGO_URI') else '❌ not set'
    logger.info(f"MONGO_URI: {mongo_uri}")
    logger.info(f"MONGO_DB_NAME: {settings.database.db_name}")
    logger.info(f"Starting server on {settings.host}:{port}")

    uvicorn.run(
        "hospitalrecords.app:app",
        host=settings.host,
        port=port,
        reload=settings.is_development and settings.debug,
        log_level=settings.logging.level.lower(),
    )


if __name__ == "__main__":
    main()
