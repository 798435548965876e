"""Password hashing helpers built on passlib's bcrypt context."""

from passlib.context import CryptContext

from ..config import settings

pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=settings.bcrypt_rounds,
    bcrypt__min_rounds=settings.bcrypt_rounds,
)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Check a plain text password against a stored bcrypt hash."""
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password: str) -> str:
    """Hash a plain text password with the configured bcrypt cost."""
    return pwd_context.hash(password)


def password_needs_rehash(hashed_password: str) -> bool:
    """True when a stored hash uses a weaker cost than configured or an old scheme."""
    return pwd_context.needs_update(hashed_password)
