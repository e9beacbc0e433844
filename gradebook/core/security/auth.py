from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt
from fastapi import Depends
from fastapi.security import OAuth2PasswordBearer
from passlib.context import CryptContext

from gradebook.core.config.settings import Settings, get_settings
from gradebook.core.errors import Forbidden, InvalidToken, Unauthenticated
from gradebook.models.user import RoleType
from gradebook.schemas.user import CurrentUser

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

# auto_error is off so a missing token gets the structured 401 below
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/login", auto_error=False)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)

def create_hashed_password(password: str) -> str:
    return pwd_context.hash(password)

def generate_token(data: dict, settings: Settings, expires_delta: Optional[timedelta] = None) -> str:
    to_encode = data.copy()
    if expires_delta is None:
        expires_delta = timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    expire = datetime.now(timezone.utc) + expires_delta
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)

def token_for_user(user, settings: Settings) -> str:
    return generate_token(
        {"sub": str(user.id), "email": user.email, "role": user.role.value},
        settings,
    )

def decode_token(token: str, settings: Settings) -> CurrentUser:
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except jwt.ExpiredSignatureError:
        raise InvalidToken("Token has expired")
    except jwt.PyJWTError:
        raise InvalidToken("Invalid token")

    try:
        return CurrentUser(
            id=int(payload["sub"]),
            email=payload["email"],
            role=RoleType(payload["role"]),
        )
    except (KeyError, TypeError, ValueError):
        raise InvalidToken("Invalid token payload")


def get_current_user(
    token: Optional[str] = Depends(oauth2_scheme),
    settings: Settings = Depends(get_settings),
) -> CurrentUser:
    if not token:
        raise Unauthenticated("Access token required")
    return decode_token(token, settings)

def teacher_required(current_user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
    if current_user.role != RoleType.TEACHER:
        raise Forbidden("Not authorized, teacher access required")
    return current_user

def student_required(current_user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
    if current_user.role != RoleType.STUDENT:
        raise Forbidden("Not authorized, student access required")
    return current_user
