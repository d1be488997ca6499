"""Token generation, reference hashing and link helpers."""

import hashlib
import re
import secrets
import string
from urllib.parse import quote

from trustlink.config import settings
from trustlink.models import TOKEN_LENGTH

TOKEN_ALPHABET = string.ascii_uppercase + string.ascii_lowercase + string.digits


def generate_session_token(length: int = TOKEN_LENGTH) -> str:
    """Generate a random alphanumeric capability token."""
    return "".join(secrets.choice(TOKEN_ALPHABET) for _ in range(length))


def hash_reference(value: str) -> str:
    """One-way hex SHA-256 digest of a raw identity/property/vehicle reference."""
    return hashlib.sha256(value.encode("utf-8")).hexdigest()


def normalize_phone(phone: str) -> str:
    """Strip everything but digits from a phone number."""
    return re.sub(r"\D", "", phone)


def verification_url(token: str) -> str:
    """Seller-facing link for a session."""
    return f"{settings.app_url}/verify/{token}"


def results_url(token: str) -> str:
    """Buyer-facing results link for a session."""
    return f"{settings.app_url}/results/{token}"


def whatsapp_share_url(phone: str, message: str) -> str:
    """Build a wa.me link that pre-fills a message to the given number."""
    return f"https://wa.me/{normalize_phone(phone)}?text={quote(message, safe='')}"
