from fastapi import APIRouter, Depends, HTTPException
from core.dependencies import get_current_user
from core.security import verify_password, get_password_hash
from schemas.user import UserUpdate, ChangePassword
from db import db

router = APIRouter(prefix="/user", tags=["Users"])

def user_out(user: dict) -> dict:
    return {
        "_id": str(user["_id"]),
        "name": user.get("name", ""),
        "email": user["email"],
        "phone": user.get("phone", ""),
        "role": user.get("role", "user"),
        "created_at": user.get("created_at"),
    }

# GET /user/profile - current user
@router.get("/profile")
async def get_profile(current_user: dict = Depends(get_current_user)):
    return {"success": True, "user": user_out(current_user)}

# PUT /user/profile - change name and phone
@router.put("/profile")
async def update_profile(data: UserUpdate, current_user: dict = Depends(get_current_user)):
    update_data = {}
    if data.name:
        update_data["name"] = data.name
    if data.phone:
        update_data["phone"] = data.phone

    if update_data:
        await db.users.update_one({"_id": current_user["_id"]}, {"$set": update_data})
    return {
        "success": True,
        "message": "Profile updated successfully",
        "user": user_out({**current_user, **update_data}),
    }

# PUT /user/password - change password
@router.put("/password")
async def change_password(data: ChangePassword, current_user: dict = Depends(get_current_user)):
    if not verify_password(data.current_password, current_user["password"]):
        raise HTTPException(status_code=400, detail="Current password is incorrect")

    hashed_password = get_password_hash(data.new_password)
    await db.users.update_one({"_id": current_user["_id"]}, {"$set": {"password": hashed_password}})
    return {"success": True, "message": "Password updated successfully"}
