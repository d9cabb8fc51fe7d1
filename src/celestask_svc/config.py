import os
from dotenv import load_dotenv

load_dotenv()

SERVICE_HOST = os.getenv("SERVICE_HOST", "0.0.0.0")
SERVICE_PORT = int(os.getenv("SERVICE_PORT", 8000))
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

# Data transfer knobs
ERROR_DETAIL_LIMIT = int(os.getenv("ERROR_DETAIL_LIMIT", 50))
EXPORT_FILENAME_PREFIX = os.getenv("EXPORT_FILENAME_PREFIX", "celestask")
