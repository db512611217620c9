import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

from bson import ObjectId
from fastapi import Depends, Request
from jose import JWTError, jwt
from passlib.context import CryptContext

from .config import Settings, get_settings
from .errors import Unauthorized
from .repositories import UserRepository, get_user_repository

logger = logging.getLogger(__name__)

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


class InvalidToken(Exception):
    pass


class TokenService:
    """Signs and checks the per-request credential carrying a user id."""

    def __init__(self, secret_key: str, algorithm: str = "HS256", expires_minutes: int = 60 * 24):
        self.secret_key = secret_key
        self.algorithm = algorithm
        self.expires_delta = timedelta(minutes=expires_minutes)

    def issue(self, user_id: str, expires_delta: Optional[timedelta] = None) -> str:
        expire = datetime.now(timezone.utc) + (expires_delta if expires_delta is not None else self.expires_delta)
        return jwt.encode({"userId": str(user_id), "exp": expire}, self.secret_key, algorithm=self.algorithm)

    def verify(self, token: str) -> str:
        """Return the user id the token was issued for.

        Raises InvalidToken for a bad signature, an expired token or a
        payload without a user id.
        """
        try:
            payload = jwt.decode(token, self.secret_key, algorithms=[self.algorithm])
        except JWTError as exc:
            raise InvalidToken(str(exc)) from exc
        user_id = payload.get("userId")
        if not user_id:
            raise InvalidToken("Token has no user id")
        return user_id


def get_token_service(settings: Settings = Depends(get_settings)) -> TokenService:
    return TokenService(settings.jwt_secret, settings.jwt_algorithm, settings.token_expire_minutes)


# Dependency to get current user

def get_current_user(
    request: Request,
    settings: Settings = Depends(get_settings),
    tokens: TokenService = Depends(get_token_service),
    users: UserRepository = Depends(get_user_repository),
) -> Dict[str, Any]:
    token = request.headers.get(settings.auth_header)
    if not token:
        raise Unauthorized("Not Authorized")
    try:
        user_id = tokens.verify(token)
    except InvalidToken as exc:
        logger.info("Rejected token on %s: %s", request.url.path, exc)
        raise Unauthorized("Not Authorized to view this page")
    user = None
    if ObjectId.is_valid(user_id):
        user = users.find_by_id(user_id)
    if not user:
        logger.info("Token for missing user %s on %s", user_id, request.url.path)
        raise Unauthorized("Not authorized to access this route, wrong user")
    return user
