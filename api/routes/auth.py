"""Registration, login and logout routes (session cookie based)"""

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.orm import Session
import logging

from api.dependencies import get_db, get_current_user
from domain.models import AppUser
from domain.schemas.auth_schemas import LoginRequest, RegisterRequest, UserResponse
from services.user_service import UserService

router = APIRouter(prefix="/auth", tags=["Auth"])
logger = logging.getLogger("dancymeals.api.auth")


@router.post("/register", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
def register(payload: RegisterRequest, request: Request, db: Session = Depends(get_db)):
    """Create an account and sign it in on the current host"""
    user = UserService.register(db, payload)
    UserService.login(request.session, user)
    return user


@router.post("/login", response_model=UserResponse)
def login(payload: LoginRequest, request: Request, db: Session = Depends(get_db)):
    user = UserService.authenticate(db, payload.email, payload.password)
    UserService.login(request.session, user)
    return user


@router.post("/logout")
def logout(request: Request):
    UserService.logout(request.session)
    return {"success": True}


@router.get("/me", response_model=UserResponse)
def me(user: AppUser = Depends(get_current_user)):
    return user
