"""
Account registration, credential checks and token issuance.

Passwords are stored as bcrypt hashes only. Login failures share a single
error so callers cannot tell an unknown username from a wrong password.
"""

import logging
from datetime import datetime, timezone

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from marketplace.core.errors import AuthError, ConflictError, ValidationError
from marketplace.core.roles import Role, parse_role
from marketplace.core.security import (
    create_access_token,
    dummy_verify_password,
    get_password_hash,
    verify_password,
)
from marketplace.models.revoked_token import RevokedToken
from marketplace.models.user import User

logger = logging.getLogger("uvicorn.error")

INVALID_CREDENTIALS = "Invalid credentials"


def register_user(db: Session, username: str, password: str, role: Role) -> User:
    username = str(username or "").strip()
    if not username:
        raise ValidationError("Username is required")
    if not password:
        raise ValidationError("Password is required")
    parsed_role = parse_role(role)
    if parsed_role is None:
        raise ValidationError("Role must be client or freelancer")

    existing = db.query(User).filter(User.username == username).first()
    if existing:
        raise ConflictError("Username already exists")

    user = User(
        username=username,
        password=get_password_hash(password),
        role=parsed_role.value,
    )
    db.add(user)
    try:
        db.commit()
    except IntegrityError:
        # Lost a race against a concurrent registration of the same name.
        db.rollback()
        raise ConflictError("Username already exists")
    db.refresh(user)
    logger.info("Registered %s account id=%s", user.role, user.id)
    return user


def authenticate_user(db: Session, username: str, password: str) -> User:
    username = str(username or "").strip()
    user = db.query(User).filter(User.username == username).first() if username else None
    if user is None:
        dummy_verify_password()
        logger.warning("Failed login attempt")
        raise AuthError(INVALID_CREDENTIALS)
    if not password or not verify_password(password, user.password):
        logger.warning("Failed login attempt")
        raise AuthError(INVALID_CREDENTIALS)
    return user


def issue_token(user: User, secret_key: str) -> str:
    token = create_access_token(
        {"sub": str(user.id), "username": user.username, "role": user.role},
        secret_key,
    )
    logger.info("Issued access token for user id=%s", user.id)
    return token


def revoke_token(db: Session, claims: dict) -> None:
    jti = claims.get("jti")
    if not jti or db.get(RevokedToken, jti) is not None:
        return
    expires_at = datetime.fromtimestamp(int(claims.get("exp", 0)), tz=timezone.utc)
    db.add(RevokedToken(jti=jti, expires_at=expires_at))
    db.commit()
    logger.info("Revoked token for user id=%s", claims.get("sub"))
