from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from .. import crud, mailer, models, security
from ..auth import authenticate_user, get_current_user
from ..database import get_db
from ..deps import get_dispatch
from ..errors import AuthError, ConflictError
from ..mailer import Dispatch
from ..models import Role
from ..schemas import LoginIn, Message, PasswordChange, Token, UserCreate, UserOut
from ..token import create_access_token

router = APIRouter(prefix="/api/auth", tags=["auth"])


@router.post("/register", response_model=Token, status_code=status.HTTP_201_CREATED)
def register(payload: UserCreate, db: Session = Depends(get_db), dispatch: Dispatch = Depends(get_dispatch)):
    if crud.get_user_by_email(db, payload.email):
        raise ConflictError("Email already registered")
    user = crud.create_user(db, payload.email, payload.password, Role(payload.role), payload.name)
    dispatch(user.email, mailer.welcome(payload.name or user.email))
    token = create_access_token(user.id, user.role)
    return Token(access_token=token, user_id=user.id, role=user.role)


@router.post("/login", response_model=Token)
def login(payload: LoginIn, db: Session = Depends(get_db)):
    user = authenticate_user(db, payload.email, payload.password)
    if not user:
        raise AuthError("Invalid credentials")
    if not user.is_active:
        raise AuthError("Your account has been deactivated", 403)
    token = create_access_token(user.id, user.role)
    return Token(access_token=token, user_id=user.id, role=user.role)


@router.get("/me", response_model=UserOut)
def me(current_user: models.User = Depends(get_current_user)):
    return current_user


@router.put("/password", response_model=Message)
def change_password(
    payload: PasswordChange,
    db: Session = Depends(get_db),
    current_user: models.User = Depends(get_current_user),
):
    if not security.verify_password(payload.current_password, current_user.hashed_password):
        raise AuthError("Current password is incorrect")
    crud.set_password(db, current_user, payload.new_password)
    return Message(message="Password updated successfully")
