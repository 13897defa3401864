import os

from .base import *  # noqa: F401,F403

SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")

DEBUG = True
LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")

AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "1")))
ALLOW_INSECURE_GEOLOCATION = bool(int(os.getenv("ALLOW_INSECURE_GEOLOCATION", "1")))
