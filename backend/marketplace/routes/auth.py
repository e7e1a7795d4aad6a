from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session

from marketplace.core.auth import get_current_identity, get_token_claims
from marketplace.core.config import (
    ACCESS_TOKEN_EXPIRE_MINUTES,
    AUTH_COOKIE_NAME,
    COOKIE_SECURE,
    SECRET_KEY,
)
from marketplace.database.deps import get_db
from marketplace.schemas.user import Identity, LoginOut, UserCreate, UserLogin, UserOut
from marketplace.services.identity import authenticate_user, issue_token, register_user, revoke_token

router = APIRouter(prefix="/auth", tags=["Auth"])


@router.post("/register", response_model=UserOut, status_code=status.HTTP_201_CREATED)
def register(payload: UserCreate, db: Session = Depends(get_db)):
    user = register_user(db, payload.username, payload.password, payload.role)
    return UserOut.model_validate(user)


@router.post("/login", response_model=LoginOut)
def login(credentials: UserLogin, response: Response, db: Session = Depends(get_db)):
    user = authenticate_user(db, credentials.username, credentials.password)
    token = issue_token(user, SECRET_KEY)
    response.set_cookie(
        key=AUTH_COOKIE_NAME,
        value=token,
        httponly=True,
        secure=COOKIE_SECURE,
        samesite="lax",
        max_age=ACCESS_TOKEN_EXPIRE_MINUTES * 60,
    )
    return LoginOut(user=UserOut.model_validate(user), access_token=token)


@router.post("/logout")
def logout(
    response: Response,
    claims: dict = Depends(get_token_claims),
    db: Session = Depends(get_db),
):
    revoke_token(db, claims)
    response.delete_cookie(key=AUTH_COOKIE_NAME, httponly=True, secure=COOKIE_SECURE, samesite="lax")
    return {"detail": "Logged out"}


@router.get("/me", response_model=Identity)
def me(identity: Identity = Depends(get_current_identity)):
    return identity
