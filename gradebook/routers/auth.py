import logging

from fastapi import APIRouter, Depends
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from gradebook.core.config.settings import Settings, get_settings
from gradebook.core.errors import Conflict, ErrorCode, NotFound, Unauthenticated
from gradebook.core.security.auth import (
    create_hashed_password,
    get_current_user,
    token_for_user,
    verify_password,
)
from gradebook.crud import users as users_crud
from gradebook.db.session import get_db
from gradebook.schemas.user import CurrentUser, LoginRequest, RegisterRequest, TokenResponse, UserProfile

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["authentication"])

@router.post("/register", response_model=TokenResponse)
def register(
    request: RegisterRequest,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    # Check if email already exists
    if users_crud.get_user_by_email(request.email, db):
        raise Conflict(f"Email {request.email} is already registered", ErrorCode.EMAIL_TAKEN)

    try:
        user = users_crud.create_user(
            db,
            email=request.email,
            hashed_password=create_hashed_password(request.password),
            first_name=request.first_name,
            last_name=request.last_name,
            role=request.role,
        )
    except IntegrityError:
        db.rollback()
        raise Conflict(f"Email {request.email} is already registered", ErrorCode.EMAIL_TAKEN)

    logger.info("Registered %s account %s", user.role.value, user.id)
    return TokenResponse(token=token_for_user(user, settings), user=UserProfile.model_validate(user))

@router.post("/login", response_model=TokenResponse)
def login(
    request: LoginRequest,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    user = users_crud.get_user_by_email(request.email, db)

    # Verify credentials
    if not user or not verify_password(request.password, user.hashed_password):
        logger.warning("Failed login for %s", request.email)
        raise Unauthenticated("Invalid credentials", ErrorCode.INVALID_CREDENTIALS)

    return TokenResponse(token=token_for_user(user, settings), user=UserProfile.model_validate(user))

@router.get("/me", response_model=UserProfile)
def me(
    current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    user = users_crud.get_user(current_user.id, db)
    if user is None:
        raise NotFound("User not found")
    return user
