from datetime import date
from typing import Optional
from fastapi import APIRouter, Depends, Request
from fastapi.security import OAuth2PasswordBearer, OAuth2PasswordRequestForm
from sqlmodel import Session, select
from pydantic import BaseModel, Field
from app.db.session import get_session
from app.core.errors import Unauthenticated, Forbidden
from app.models.user import User
from app.services.auth import AuthService

router = APIRouter()

oauth2_scheme_optional = OAuth2PasswordBearer(tokenUrl="api/v1/auth/token", auto_error=False)


class Token(BaseModel):
    access_token: str
    token_type: str

class UserCreate(BaseModel):
    name: str = Field(min_length=1)
    email: str = Field(min_length=3)
    password: str = Field(min_length=1)
    birthday: Optional[date] = None

class UserRead(BaseModel):
    id: int
    name: str
    email: str
    is_superuser: bool

def get_auth_service(session: Session = Depends(get_session)) -> AuthService:
    return AuthService(session)

def get_current_user_optional(
    request: Request,
    token: Optional[str] = Depends(oauth2_scheme_optional),
    session: Session = Depends(get_session)
) -> Optional[User]:
    """Resolve the caller from a bearer token, else from the session login."""
    user = None
    if token:
        email = AuthService.decode_access_token(token)
        if email:
            user = session.exec(select(User).where(User.email == email)).first()
    else:
        user_id = request.session.get("user_id")
        if user_id is not None:
            user = session.get(User, user_id)

    if user is None or not user.is_active:
        return None
    return user

def get_current_user(user: Optional[User] = Depends(get_current_user_optional)) -> User:
    if user is None:
        raise Unauthenticated("Could not validate credentials")
    return user

def get_current_superuser(user: User = Depends(get_current_user)) -> User:
    if not user.is_superuser:
        raise Forbidden()
    return user

@router.post("/register", response_model=UserRead, status_code=201)
def register(user_in: UserCreate, service: AuthService = Depends(get_auth_service)):
    return service.register_user(user_in.name, user_in.email, user_in.password, birthday=user_in.birthday)

@router.post("/token", response_model=Token)
def login_for_access_token(
    request: Request,
    form_data: OAuth2PasswordRequestForm = Depends(),
    service: AuthService = Depends(get_auth_service)
):
    user = service.authenticate_user(form_data.username, form_data.password)
    if not user:
        raise Unauthenticated("Invalid email or password")

    # Browser clients ride on the session cookie, API clients on the token
    request.session["user_id"] = user.id
    access_token = service.create_access_token(data={"sub": user.email})
    return {"access_token": access_token, "token_type": "bearer"}

@router.post("/logout")
def logout(request: Request):
    request.session.clear()
    return {"message": "Logged out"}

@router.get("/me", response_model=UserRead)
def read_me(current_user: User = Depends(get_current_user)):
    return current_user
