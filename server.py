"""
Development server for the number guessing API.
Run: python server.py  (PORT and LOG_LEVEL from the environment)
"""

import logging
import os

import uvicorn

from numberguess.config import LOG_LEVEL

PORT = int(os.environ.get("PORT", "8000"))

if __name__ == "__main__":
    logging.basicConfig(
        level=LOG_LEVEL,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    uvicorn.run("numberguess.api.main:app", host="0.0.0.0", port=PORT)
