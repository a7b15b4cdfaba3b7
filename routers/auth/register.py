from fastapi import APIRouter, HTTPException
from db import db
from schemas.user import UserCreate
from core.security import get_password_hash, create_access_token
import uuid
from datetime import datetime, timezone

router = APIRouter()

@router.post("/register")
async def register(user: UserCreate):
    email = user.email.lower()
    existing = await db.users.find_one({"email": email})
    if existing:
        raise HTTPException(status_code=400, detail="User already exists")

    new_user = {
        "_id": str(uuid.uuid4()),
        "name": user.name,
        "email": email,
        "password": get_password_hash(user.password),
        "role": "user",
        "created_at": datetime.now(timezone.utc),
    }
    await db.users.insert_one(new_user)
    token = create_access_token(data={"sub": new_user["_id"]})
    return {
        "success": True,
        "token": token,
        "user": {"_id": new_user["_id"], "name": new_user["name"], "email": email},
    }
