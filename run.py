#!/usr/bin/env python3
"""
Script to run the LLM Hardware Calculator API server.
"""

import logging

import uvicorn
from dotenv import load_dotenv

# Load environment variables before settings are read
load_dotenv()

from hwcalc.settings import settings  # noqa: E402

if __name__ == "__main__":
    logging.basicConfig(
        level=settings.LOG_LEVEL.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logger = logging.getLogger("hwcalc")
    logger.info("Starting API on %s:%s", settings.API_HOST, settings.API_PORT)
    logger.info("API Documentation: http://localhost:%s/api/docs", settings.API_PORT)

    uvicorn.run(
        "hwcalc.main:app",
        host=settings.API_HOST,
        port=settings.API_PORT,
        reload=settings.RELOAD,
        log_level=settings.LOG_LEVEL.lower(),
    )
