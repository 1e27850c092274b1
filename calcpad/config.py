"""
Configuration constants for the calcpad service.
"""
import os
from dotenv import load_dotenv

load_dotenv()

# Operand display grouping
THOUSANDS_SEPARATOR = os.getenv("THOUSANDS_SEPARATOR", ",")
DECIMAL_POINT = os.getenv("DECIMAL_POINT", ".")
GROUP_SIZE = int(os.getenv("GROUP_SIZE", "3"))

# Guardrails
MAX_SESSIONS = int(os.getenv("MAX_SESSIONS", "1000"))
MAX_EVENTS_PER_REPLAY = int(os.getenv("MAX_EVENTS_PER_REPLAY", "500"))
EVENT_RATE_LIMIT = os.getenv("EVENT_RATE_LIMIT", "120/minute")

# Logging
LOG_FILE = os.getenv("LOG_FILE", "calcpad.log")
LOG_MAX_BYTES = int(os.getenv("LOG_MAX_BYTES", str(10 * 1024 * 1024)))  # 10MB
LOG_BACKUP_COUNT = int(os.getenv("LOG_BACKUP_COUNT", "3"))
SLOW_REQUEST_THRESHOLD_MS = float(os.getenv("SLOW_REQUEST_THRESHOLD_MS", "250"))
