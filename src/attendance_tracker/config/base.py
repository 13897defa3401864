"""Settings shared by every environment; read from the process environment."""
import os

SECRET_KEY = os.getenv("SECRET_KEY", "please-set-SECRET_KEY")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "attendance_db"),
}

DEBUG = False
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

# If enabled, schema.sql is applied on startup (idempotent: CREATE IF NOT EXISTS)
AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "0")))

# Day bucketing, "today" and shift times are all in this zone
EMPLOYEE_TIMEZONE = os.getenv("EMPLOYEE_TIMEZONE", "UTC")

SHIFT_START = os.getenv("SHIFT_START", "09:00")
GRACE_MINUTES = int(os.getenv("GRACE_MINUTES", "15"))
OVERTIME_THRESHOLD_HOURS = float(os.getenv("OVERTIME_THRESHOLD_HOURS", "8"))
AUTO_CLOCK_OUT_TIME = os.getenv("AUTO_CLOCK_OUT_TIME", "23:59")

GEOLOCATION_REQUIRED = bool(int(os.getenv("GEOLOCATION_REQUIRED", "0")))
GEO_ACCURACY_THRESHOLD_M = float(os.getenv("GEO_ACCURACY_THRESHOLD_M", "100"))
GEO_TIMEOUT_SECONDS = float(os.getenv("GEO_TIMEOUT_SECONDS", "10"))
# "lat,lng"; empty disables the workplace geofence
GEOFENCE_CENTER = os.getenv("GEOFENCE_CENTER", "")
GEOFENCE_RADIUS_M = float(os.getenv("GEOFENCE_RADIUS_M", "200"))
# Lets plain-HTTP deployments (local dev behind no TLS) submit positions
ALLOW_INSECURE_GEOLOCATION = bool(int(os.getenv("ALLOW_INSECURE_GEOLOCATION", "0")))
