import os
import yaml

ROOT_PATH = os.path.dirname(__file__)
CONFIG_FILE_PATH = os.path.join(ROOT_PATH, "env.yaml")

if os.path.exists(CONFIG_FILE_PATH):
    with open(CONFIG_FILE_PATH, "r") as r_file:
        data = yaml.safe_load(r_file) or dict()
else:
    data = dict()


class ApplicationConfig:
    DB_URI = data.get("DB_URI", "sqlite+aiosqlite:///./dairy.db")
    API_PREFIX = data.get("API_PREFIX", "/api")
    API_PORT = data.get("API_PORT", 8000)
    API_HOST = data.get("API_HOST", "0.0.0.0")
    API_RELOAD = bool(data.get("API_RELOAD", False))
    CORS_ORIGINS = data.get("CORS_ORIGINS", [])
    CORS_ALLOW_CREDENTIALS = data.get("CORS_ALLOW_CREDENTIALS", True)
    LOG_LEVEL = data.get("LOG_LEVEL", "INFO")
    CREATE_TABLES_ON_STARTUP = bool(data.get("CREATE_TABLES_ON_STARTUP", True))

    # Rate engine
    RATE_CACHE_TTL_SECONDS = data.get("RATE_CACHE_TTL_SECONDS", 60)
    RATE_LOOKUP_TIMEOUT_SECONDS = data.get("RATE_LOOKUP_TIMEOUT_SECONDS", 2.0)
    DEFAULT_FAT = str(data.get("DEFAULT_FAT", "4.0"))  # Used when neither packet nor settings give fat
    DEFAULT_SNF = str(data.get("DEFAULT_SNF", "8.5"))
    DEFAULT_MILK_TYPE = data.get("DEFAULT_MILK_TYPE", "COW")

    # Ledger
    REQUEST_TIMEOUT_SECONDS = data.get("REQUEST_TIMEOUT_SECONDS", 10.0)
    ALLOCATION_MAX_RETRIES = data.get("ALLOCATION_MAX_RETRIES", 3)
    ALLOCATION_RETRY_BACKOFF_SECONDS = data.get("ALLOCATION_RETRY_BACKOFF_SECONDS", 0.05)

    # Events and notifications
    EVENT_QUEUE_SIZE = data.get("EVENT_QUEUE_SIZE", 100)
    NOTIFICATION_ENABLED = bool(data.get("NOTIFICATION_ENABLED", True))
    NOTIFICATION_WEBHOOK = data.get("NOTIFICATION_WEBHOOK", None)

    # AMCU collection unit bridge
    AMCU_ENABLED = bool(data.get("AMCU_ENABLED", False))
    AMCU_HOST = data.get("AMCU_HOST", "127.0.0.1")
    AMCU_PORT = data.get("AMCU_PORT", 4001)
    AMCU_RECONNECT_SECONDS = data.get("AMCU_RECONNECT_SECONDS", 5)
    AMCU_INGEST_QUEUE_SIZE = data.get("AMCU_INGEST_QUEUE_SIZE", 1000)
    AMCU_ENQUEUE_TIMEOUT_SECONDS = data.get("AMCU_ENQUEUE_TIMEOUT_SECONDS", 5.0)
