#!/usr/bin/env python3
"""Run the Lunchbox.ai API with uvicorn."""
import os
import sys
import logging
import uvicorn
from dotenv import load_dotenv

# Add project root to Python path
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

load_dotenv()

from lunchbox.core.config import get_settings

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

def main():
    settings = get_settings()
    logger.info(f"Starting {settings.PROJECT_NAME} ({settings.ENVIRONMENT}) on {settings.HOST}:{settings.PORT}")
    uvicorn.run(
        "lunchbox.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.ENVIRONMENT == "development"
    )

if __name__ == "__main__":
    main()
