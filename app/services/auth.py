"""Authentication service: user registration and credential checks."""

import logging

import bcrypt
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from app.models.user import AuthResponse, User, UserCreate, UserResponse
from app.services.tokens import issue_token

logger = logging.getLogger(__name__)

# bcrypt only looks at the first 72 bytes of the input
BCRYPT_MAX_BYTES = 72


class DuplicateEmailError(Exception):
    """Raised when registering an email that already exists."""
    pass


class InvalidCredentialsError(Exception):
    """Raised when email or password does not match.

    The message is the same for an unknown email and a wrong password.
    """

    def __init__(self) -> None:
        super().__init__("Invalid credentials")


def _password_bytes(password: str) -> bytes:
    return password.encode("utf-8")[:BCRYPT_MAX_BYTES]


def hash_password(password: str) -> str:
    """Hash a password using bcrypt with a per-record random salt."""
    salt = bcrypt.gensalt()
    return bcrypt.hashpw(_password_bytes(password), salt).decode("utf-8")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password against its hash."""
    return bcrypt.checkpw(_password_bytes(plain_password), hashed_password.encode("utf-8"))


# Compared against when the email is unknown so both failure paths cost one bcrypt check
_DUMMY_HASH = hash_password("not-a-real-password")


def get_user_by_email(session: Session, email: str) -> User | None:
    """Get a user by (normalized) email address."""
    return session.exec(select(User).where(User.email == email.strip().lower())).first()


def register_user(session: Session, user_data: UserCreate) -> User:
    """
    Create a new user.

    Raises:
        DuplicateEmailError: If the email is already registered
    """
    if get_user_by_email(session, user_data.email) is not None:
        raise DuplicateEmailError("User already exists with this email")

    user = User(
        name=user_data.name,
        email=user_data.email,
        hashed_password=hash_password(user_data.password),
    )
    session.add(user)
    try:
        session.commit()
    except IntegrityError:
        # Concurrent registration won the unique index
        session.rollback()
        raise DuplicateEmailError("User already exists with this email")
    session.refresh(user)

    logger.info("User registered", extra={"user_id": str(user.id)})
    return user


def verify_credentials(session: Session, email: str, password: str) -> User:
    """
    Authenticate a user by email and password.

    Raises:
        InvalidCredentialsError: If the email is unknown or the password is wrong
    """
    user = get_user_by_email(session, email)
    if user is None:
        verify_password(password, _DUMMY_HASH)
        logger.info("Login failed")
        raise InvalidCredentialsError()
    if not verify_password(password, user.hashed_password):
        logger.info("Login failed")
        raise InvalidCredentialsError()
    return user


def create_auth_response(user: User, message: str) -> AuthResponse:
    """Create an authentication response with a fresh token."""
    token, expires_at = issue_token(user.id)
    return AuthResponse(
        message=message,
        token=token,
        user=UserResponse.model_validate(user),
        expires_at=expires_at,
    )
