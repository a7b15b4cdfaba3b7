from fastapi import Depends, Request, HTTPException, status
from jose import jwt, JWTError
from core.config import SECRET_KEY, ALGORITHM
from db import db

async def get_current_user(request: Request):
    auth_header = request.headers.get("Authorization", "")
    scheme, _, token = auth_header.partition(" ")
    if scheme.lower() != "bearer" or not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not Authorized. Please log in again.",
        )

    try:
        payload = jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
        user_id: str = payload.get("sub")
        if user_id is None:
            raise HTTPException(status_code=401, detail="Invalid token. Please log in again.")
    except JWTError:
        # jose raises ExpiredSignatureError (a JWTError) for stale tokens too
        raise HTTPException(status_code=401, detail="Invalid token. Please log in again.")

    user = await db.users.find_one({"_id": user_id})
    if user is None:
        raise HTTPException(status_code=401, detail="User not found")
    return user

async def verify_admin(current_user: dict = Depends(get_current_user)):
    if current_user.get("role") != "admin":
        raise HTTPException(status_code=403, detail="Admin access required")
    return current_user
