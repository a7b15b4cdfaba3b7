from fastapi import APIRouter, HTTPException
from db import db
from schemas.user import LoginRequest
from core.security import verify_password, create_access_token

router = APIRouter()

@router.post("/login")
async def login(form_data: LoginRequest):
    user = await db.users.find_one({"email": form_data.email.lower()})
    if not user or not verify_password(form_data.password, user["password"]):
        raise HTTPException(status_code=401, detail="Invalid Credentials")

    token = create_access_token(data={"sub": user["_id"]})
    return {
        "success": True,
        "token": token,
        "user": {"_id": user["_id"], "name": user.get("name", ""), "email": user["email"]},
    }
