import logging

import bcrypt

from firise.config import BCRYPT_ROUNDS, DEMO_USER_ID

logger = logging.getLogger(__name__)

# bcrypt only looks at the first 72 bytes and newer releases raise past that.
_BCRYPT_MAX_BYTES = 72


def _secret(password: str) -> bytes:
    return password.encode("utf-8")[:_BCRYPT_MAX_BYTES]


def hash_password(password: str) -> str:
    """Salted bcrypt hash of ``password``, as text for storage."""
    return bcrypt.hashpw(_secret(password), bcrypt.gensalt(rounds=BCRYPT_ROUNDS)).decode("utf-8")


def verify_password(password: str, stored_hash: str) -> bool:
    """True if ``password`` matches ``stored_hash``; a malformed hash never matches."""
    try:
        return bcrypt.checkpw(_secret(password), stored_hash.encode("utf-8"))
    except ValueError as e:
        logger.warning("Rejecting malformed password hash: %s", e)
        return False


async def get_current_user() -> int:
    """
    FastAPI dependency — the effective user id for the request.
    The app runs against a single demo account, so this is always the
    configured DEMO_USER_ID; every ownership check goes through here.
    """
    return DEMO_USER_ID
