# app/core/config.py

import os
from dotenv import load_dotenv

load_dotenv()

# Remote appointment API
MAIN_SERVER_GRAPHQL_URL = os.getenv("MAIN_SERVER_GRAPHQL_URL")
EXTERNAL_API_AUTH_TOKEN = os.getenv("EXTERNAL_API_AUTH_TOKEN")
GRAPHQL_TIMEOUT_SECONDS = float(os.getenv("GRAPHQL_TIMEOUT_SECONDS", 15))

# Scheduling
DEFAULT_DOCTOR_TIME_ZONE = os.getenv("DEFAULT_DOCTOR_TIME_ZONE", "America/Toronto")
APPOINTMENTS_PAGE_SIZE = int(os.getenv("APPOINTMENTS_PAGE_SIZE", 20))
URGENT_QUERY_LIMIT = int(os.getenv("URGENT_QUERY_LIMIT", 200))
HISTORY_QUERY_LIMIT = int(os.getenv("HISTORY_QUERY_LIMIT", 100))
LIVE_WINDOW_DAYS = int(os.getenv("LIVE_WINDOW_DAYS", 15))
URGENT_WINDOW_DAYS = int(os.getenv("URGENT_WINDOW_DAYS", 2))
NOTICE_SECONDS = int(os.getenv("NOTICE_SECONDS", 4))

# Identity
JWT_SECRET_KEY = os.getenv("JWT_SECRET_KEY", "change-me-in-production")
ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", 60))

# Doctor account store
MONGO_URI = os.getenv("MONGO_URI")
MONGO_DB_NAME = os.getenv("MONGO_DB_NAME", "clinic_dashboard")

# Geocoding (map display only)
GEOCODER_URL = os.getenv("GEOCODER_URL", "https://nominatim.openstreetmap.org/search")
GEOCODER_USER_AGENT = os.getenv("GEOCODER_USER_AGENT", "MapleIME-DoctorDashboard/1.0")
GEOCODER_TIMEOUT_SECONDS = float(os.getenv("GEOCODER_TIMEOUT_SECONDS", 10))

CORS_ORIGINS = [
    origin.strip()
    for origin in os.getenv("CORS_ORIGINS", "http://localhost:3000").split(",")
    if origin.strip()
]
