"""Service settings, read from the environment (a local .env is honoured)."""

import os

from dotenv import load_dotenv

load_dotenv()

# Extra CORS origin besides localhost
FRONTEND_URL = os.getenv("FRONTEND_URL")

# Default sweep density for response endpoints
SWEEP_POINTS = int(os.getenv("PICKUP_SWEEP_POINTS", "500"))

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
