import secrets

from passlib.context import CryptContext

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def new_session_id() -> str:
    return secrets.token_urlsafe(32)


def get_password_hash(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(password: str, hashed: str) -> bool:
    return pwd_context.verify(password, hashed)


def dummy_verify() -> bool:
    """Spend the cost of a verify when there is no user to check against."""
    return pwd_context.dummy_verify()
