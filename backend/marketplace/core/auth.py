import logging
from typing import Optional

from fastapi import Depends, Request
from fastapi.security import APIKeyCookie, OAuth2PasswordBearer
from jose import JWTError
from sqlalchemy.orm import Session

from marketplace.core.config import AUTH_COOKIE_NAME, SECRET_KEY
from marketplace.core.errors import AuthError, ForbiddenError
from marketplace.core.roles import Role, has_role, parse_role
from marketplace.core.security import decode_access_token
from marketplace.database.deps import get_db
from marketplace.models.revoked_token import RevokedToken
from marketplace.schemas.user import Identity

if not SECRET_KEY:
    raise RuntimeError("SECRET_KEY is not configured. Set the environment variable before starting the API.")

logger = logging.getLogger("uvicorn.error")

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/login", auto_error=False)
cookie_scheme = APIKeyCookie(name=AUTH_COOKIE_NAME, auto_error=False)


def extract_token(request: Request, cookie_token: Optional[str], bearer_token: Optional[str]) -> Optional[str]:
    if cookie_token:
        return cookie_token
    if bearer_token:
        return bearer_token
    # Some clients send the raw token without the Bearer scheme.
    raw_header = str(request.headers.get("authorization") or "").strip()
    return raw_header or None


def get_token_claims(
    request: Request,
    cookie_token: Optional[str] = Depends(cookie_scheme),
    bearer_token: Optional[str] = Depends(oauth2_scheme),
    db: Session = Depends(get_db),
) -> dict:
    token = extract_token(request, cookie_token, bearer_token)
    if not token:
        raise AuthError("Authentication required")
    try:
        payload = decode_access_token(token, SECRET_KEY)
    except JWTError:
        logger.warning("Rejected token on %s %s", request.method, request.url.path)
        raise AuthError("Invalid or expired token")

    jti = payload.get("jti")
    if jti and db.get(RevokedToken, jti) is not None:
        raise AuthError("Invalid or expired token")
    return payload


def get_current_identity(claims: dict = Depends(get_token_claims)) -> Identity:
    user_id = claims.get("sub")
    username = claims.get("username")
    role = parse_role(claims.get("role"))
    if user_id is None or not username or role is None:
        raise AuthError("Invalid or expired token")
    try:
        return Identity(id=int(user_id), username=username, role=role)
    except ValueError:
        raise AuthError("Invalid or expired token")


def require_role(role: Role):
    def dependency(identity: Identity = Depends(get_current_identity)) -> Identity:
        if not has_role(identity, role):
            raise ForbiddenError(f"Only {role.value}s can perform this action")
        return identity

    return dependency


get_current_client = require_role(Role.CLIENT)
get_current_freelancer = require_role(Role.FREELANCER)
