"""Authentication API endpoints."""

from fastapi import APIRouter, HTTPException, status

from app.api.deps import CurrentUser, DBSession, OptionalTokenClaims
from app.models.user import (
    AuthResponse,
    MeResponse,
    MessageResponse,
    UserCreate,
    UserLogin,
    UserResponse,
)
from app.services.auth import (
    DuplicateEmailError,
    InvalidCredentialsError,
    create_auth_response,
    register_user,
    verify_credentials,
)
from app.services.tokens import revoke_token

router = APIRouter(prefix="/auth", tags=["Auth"])


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
def register_endpoint(session: DBSession, user_data: UserCreate) -> AuthResponse:
    """Register a new user account."""
    try:
        user = register_user(session, user_data)
    except DuplicateEmailError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e),
        )

    return create_auth_response(user, "User registered successfully")


@router.post("/login", response_model=AuthResponse)
def login_endpoint(session: DBSession, credentials: UserLogin) -> AuthResponse:
    """Sign in with email and password."""
    try:
        user = verify_credentials(session, credentials.email, credentials.password)
    except InvalidCredentialsError as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=str(e),
        )

    return create_auth_response(user, "Login successful")


@router.post("/logout", response_model=MessageResponse)
def logout_endpoint(session: DBSession, claims: OptionalTokenClaims) -> MessageResponse:
    """Sign out.

    The client discards its token either way; a valid token sent along is
    also added to the revocation set so it stops working immediately.
    """
    if claims is not None:
        revoke_token(session, claims)
    return MessageResponse(message="Logout successful")


@router.get("/me", response_model=MeResponse)
def me_endpoint(current_user: CurrentUser) -> MeResponse:
    """Return the authenticated user."""
    return MeResponse(user=UserResponse.model_validate(current_user))
