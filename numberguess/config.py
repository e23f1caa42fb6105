"""
Single place for deployment configuration.
Values come from environment variables; defaults suit local development.
"""
import os

# Recorded alongside the game records on instantiate
CONTRACT_NAME = os.environ.get("CONTRACT_NAME", "numberguess")
CONTRACT_VERSION = os.environ.get("CONTRACT_VERSION", "0.1.0")

# Set to an integer for reproducible target draws (development only)
_seed = os.environ.get("RANDOM_SEED")
RANDOM_SEED = int(_seed) if _seed not in (None, "") else None

LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").upper()

# Comma-separated list of allowed frontend origins
CORS_ORIGINS = [
    o.strip()
    for o in os.environ.get("CORS_ORIGINS", "http://localhost:5173,http://localhost:3000").split(",")
    if o.strip()
]
