from datetime import datetime, timedelta, timezone
from jose import JWTError, jwt
from passlib.context import CryptContext
from app.config import settings
import logging

logger = logging.getLogger(__name__)

# Password hashing
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def hash_password(password: str) -> str:
    """Hash a password"""
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password against hash"""
    return pwd_context.verify(plain_password, hashed_password)


def create_access_token(user_id: int) -> str:
    """Create JWT token for a user id"""
    issued_at = datetime.now(timezone.utc)
    expire = issued_at + timedelta(days=settings.access_token_expire_days)

    to_encode = {
        "sub": str(user_id),
        "exp": expire,
        "iat": issued_at
    }

    token = jwt.encode(to_encode, settings.secret_key, algorithm=settings.algorithm)
    logger.info(f"🔑 JWT token created for user {user_id}")
    return token


def verify_token(token: str) -> int | None:
    """Verify JWT token and return the user id"""
    try:
        payload = jwt.decode(token, settings.secret_key, algorithms=[settings.algorithm])
    except JWTError as e:
        logger.warning(f"❌ JWT Error during token verification: {str(e)}")
        return None

    subject = payload.get("sub")
    if not subject:
        logger.warning("❌ No subject found in token payload")
        return None

    try:
        return int(subject)
    except ValueError:
        logger.warning(f"❌ Malformed subject in token: {subject}")
        return None
