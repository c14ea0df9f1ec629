import os

# DATABASE_URL se lee en db.py (obligatoria, sin fallback)

STORE_MAX_RETRIES = int(os.getenv("STORE_MAX_RETRIES", "3"))
STORE_RETRY_DELAY = float(os.getenv("STORE_RETRY_DELAY", "1.0"))  # segundos, fijo

BACKUP_DIR = os.getenv("BACKUP_DIR", "backups")

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_FILE = os.getenv("LOG_FILE")  # opcional: además de consola
