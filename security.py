from datetime import datetime, timezone
from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from passlib.context import CryptContext
from pydantic import ValidationError

from config import Settings
from errors import Unauthorized
from schemas import TokenClaims

BCRYPT_ROUNDS = 10

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=BCRYPT_ROUNDS)
auth_scheme = HTTPBearer(auto_error=False)


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain: str, hashed: str) -> bool:
    return pwd_context.verify(plain, hashed)


def dummy_verify() -> None:
    """Burn the same time as a real verify when there is no stored hash."""
    pwd_context.dummy_verify()


def create_access_token(data: dict, settings: Settings) -> str:
    to_encode = data.copy()
    now = datetime.now(timezone.utc)
    to_encode.update({"iat": now, "exp": now + settings.token_lifetime})
    return jwt.encode(to_encode, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str, settings: Settings) -> TokenClaims:
    try:
        payload = jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
    except JWTError as e:
        raise Unauthorized("Invalid token", str(e))
    if not payload.get("userId"):
        raise Unauthorized("Invalid token", "missing userId claim")
    try:
        return TokenClaims(**payload)
    except ValidationError as e:
        raise Unauthorized("Invalid token", str(e))


async def get_current_claims(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(auth_scheme),
) -> TokenClaims:
    if credentials is None:
        raise Unauthorized("Not authenticated")
    return decode_access_token(credentials.credentials, request.app.state.settings)
