from passlib.context import CryptContext

MIN_PASSWORD_LENGTH = 6

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(password: str, hashed_password: str) -> bool:
    return pwd_context.verify(password, hashed_password)


def validate_password_schema(password: str):
    """
    Password rules used inside pydantic schemas
    (raises ValueError, pydantic turns it into a validation error).
    """
    if len(password) < MIN_PASSWORD_LENGTH:
        raise ValueError(
            f"Password must be at least {MIN_PASSWORD_LENGTH} characters long.",
        )
    if not password.strip():
        raise ValueError("Password must not be blank.")
    return password
