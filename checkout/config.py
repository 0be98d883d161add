import os
from pathlib import Path

from dotenv import load_dotenv

# Load environment variables from the project's .env file
PROJECT_ROOT = Path(__file__).resolve().parents[1]
load_dotenv(PROJECT_ROOT / ".env")


class Config:
    # Razorpay API key id
    RAZORPAY_KEY_ID = os.getenv("RAZORPAY_KEY_ID", "")
    # Razorpay key secret, also the shared secret for callback signatures
    RAZORPAY_KEY_SECRET = os.getenv("RAZORPAY_KEY_SECRET", "")
    # Razorpay REST base URL
    RAZORPAY_BASE_URL = os.getenv("RAZORPAY_BASE_URL", "https://api.razorpay.com/v1")
    # ISO 4217 currency used for every order
    PAYMENT_CURRENCY = os.getenv("PAYMENT_CURRENCY", "INR")
    # Payment Mode: razorpay | simulated
    PAYMENT_MODE = os.getenv("PAYMENT_MODE", "razorpay")
    # Upper bound for a gateway call (seconds)
    GATEWAY_TIMEOUT_SECONDS = float(os.getenv("GATEWAY_TIMEOUT_SECONDS", "15"))

    # Server bind address/port
    HOST = os.getenv("HOST", "127.0.0.1")
    PORT = int(os.getenv("PORT", "5000"))

    # Optional JSON catalog replacing the built-in one
    CATALOG_FILE = os.getenv("CATALOG_FILE", "")

    @classmethod
    def validate(cls):
        """Return the names of missing settings; warn instead of crashing."""
        required_vars = []
        # Only require gateway keys when talking to the real gateway
        if cls.PAYMENT_MODE == "razorpay":
            required_vars += ["RAZORPAY_KEY_ID", "RAZORPAY_KEY_SECRET"]

        missing_vars = [var for var in required_vars if not getattr(cls, var)]
        if missing_vars:
            print(
                f"WARNING: missing environment variables: {', '.join(missing_vars)}. "
                "Check your .env file."
            )
        return missing_vars
