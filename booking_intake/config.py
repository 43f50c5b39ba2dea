import os
from pathlib import Path

from dotenv import load_dotenv

# Load .env from project root
env_path = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(dotenv_path=env_path)

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./bookings.db")

COMPANY_NAME = os.getenv("COMPANY_NAME", "Clean Home")

# Booking numbers look like CH-0001 (sequence) or CH-LZ3K8Q2-7XA (fallback)
BOOKING_NUMBER_PREFIX = os.getenv("BOOKING_NUMBER_PREFIX", "CH")

# Resend Email Configuration
RESEND_API_KEY = os.getenv("RESEND_API_KEY")
EMAIL_FROM_ADDRESS = os.getenv("EMAIL_FROM_ADDRESS", f"{COMPANY_NAME} <bookings@example.com>")
# Inbox that receives a copy of every new booking
ADMIN_NOTIFICATION_EMAIL = os.getenv("ADMIN_NOTIFICATION_EMAIL")

# Workforce scheduling integration - receives {"bookingNumber": ...} for each new booking
WORKFORCE_WEBHOOK_URL = os.getenv("WORKFORCE_WEBHOOK_URL")
WEBHOOK_TIMEOUT_SECONDS = float(os.getenv("WEBHOOK_TIMEOUT_SECONDS", "10"))

# Frontend base URL, used in email links
FRONTEND_URL = os.getenv("FRONTEND_URL", "http://localhost:5173")
