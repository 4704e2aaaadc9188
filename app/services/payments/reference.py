import secrets
import string
import time
from typing import Optional

REFERENCE_PREFIX = "AKA_LAW"
_SUFFIX_ALPHABET = string.digits + string.ascii_lowercase


def generate_payment_reference(now: Optional[float] = None) -> str:
    """
    Generate a payment reference, e.g. ``AKA_LAW_1718000000000_K3Z9QA``.

    Millisecond timestamp plus a 6 character base36 suffix. Uniqueness is not checked
    against the store; a collision would make later lookups resolve whichever record
    was stored first.
    """
    timestamp = int((time.time() if now is None else now) * 1000)
    suffix = "".join(secrets.choice(_SUFFIX_ALPHABET) for _ in range(6))
    return f"{REFERENCE_PREFIX}_{timestamp}_{suffix}".upper()
