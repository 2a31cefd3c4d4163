import os

SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "dtr_locator"),
}

DEBUG = True
LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")

# If enabled, app will apply schema.sql on startup (idempotent: CREATE IF NOT EXISTS)
AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "1")))

# Reconciliation engine
LOCATOR_TYPE_TAG = os.getenv("LOCATOR_TYPE_TAG", "LE")
SYNTH_SENSOR_ID = os.getenv("SYNTH_SENSOR_ID", "101")
SYNTH_DEVICE_SN = os.getenv("SYNTH_DEVICE_SN", "CLXE224760198")
RECONCILE_CONFLICT_RETRIES = int(os.getenv("RECONCILE_CONFLICT_RETRIES", "1"))
