import os

from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

# Environment configuration
ENV = os.getenv("AKALAW_ENV", "p").lower()
if ENV not in ["d", "p"]:
    raise ValueError("AKALAW_ENV must be either 'd' (development) or 'p' (production)")

# Paystack API keys
# NOTE: Keys are validated by the Paystack client at call time so the site still boots
# (and serves the catalog) while payments are being configured
PAYSTACK_PUBLIC_KEY = os.getenv("AKALAW_PAYSTACK_PUBLIC_KEY", "")
PAYSTACK_SECRET_KEY = os.getenv("AKALAW_PAYSTACK_SECRET_KEY", "")
PAYSTACK_BASE_URL = os.getenv("AKALAW_PAYSTACK_BASE_URL", "https://api.paystack.co")
PAYSTACK_CURRENCY = "ZAR"

# NOTE: Resend API key is optional - without it the email service reports unavailable
RESEND_API_KEY = os.getenv("AKALAW_RESEND_API_KEY", "")
RESEND_BASE_URL = "https://api.resend.com"

# NOTE: Admin API key is optional - without it the admin routes answer 503
ADMIN_API_KEY = os.getenv("AKALAW_ADMIN_API_KEY", "")

# Email identities
EMAIL_FROM = os.getenv("AKALAW_EMAIL_FROM", "info@akalaw.co.za")
EMAIL_FROM_NAME = os.getenv("AKALAW_EMAIL_FROM_NAME", "AKA Law")
EMAIL_ADMIN = os.getenv("AKALAW_EMAIL_ADMIN", "websales@akalaw.co.za")
EMAIL_REPLY_TO = os.getenv("AKALAW_EMAIL_REPLY_TO", "info@akalaw.co.za")

# Public site URL, used for the Paystack callback and the emailed download link
BASE_URL = os.getenv("AKALAW_BASE_URL", "http://localhost:3000").rstrip("/")

# Firestore database
FIRESTORE_DATABASE = os.getenv("AKALAW_FIRESTORE_DATABASE", "(default)")

# Allowed CORS origins
ALLOWED_ORIGINS = [
    origin.strip()
    for origin in os.getenv(
        "AKALAW_ALLOWED_ORIGINS",
        "http://localhost:3000,https://www.akalaw.co.za,https://akalaw.co.za",
    ).split(",")
    if origin.strip()
]

# Project root directory
PROJECT_ROOT = os.path.dirname(os.path.abspath(__file__))

# Pre-built document archives, one ZIP (PDF & Word) per catalog entry
DOCUMENTS_DIR = os.getenv(
    "AKALAW_DOCUMENTS_DIR", os.path.join(PROJECT_ROOT, "public", "documents")
)


def mask_secret(value: str, visible: int = 8) -> str:
    """Return a log-safe prefix of a secret."""
    if not value:
        return "NOT SET"
    return value[:visible] + "..."
