from fastapi import APIRouter
from . import register, login

auth_router = APIRouter(prefix="/user", tags=["Auth"])
auth_router.include_router(register.router)
auth_router.include_router(login.router)
