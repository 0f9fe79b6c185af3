# routers/user_auth/auth.py
import logging

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.concurrency import run_in_threadpool
from redis.asyncio import Redis
from pymongo.database import Database

from lms.deps import get_db, get_redis
from lms.repos import users
from lms.schemas.auth_schemas import UserRegister, UserSignin, TokenOut, UserOut, VerifyOut
from lms.auth.jwt import create_access_token, seconds_until_expiry
from lms.auth.dependencies import get_token_payload, get_current_user
from lms.services.session_keys import blacklisted_jti_key

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])

@router.post("/signup", response_model=UserOut, status_code=status.HTTP_201_CREATED)
async def signup(payload: UserRegister, db: Database = Depends(get_db)):
    user = await run_in_threadpool(
        users.create_user, db, payload.user_name, payload.user_email, payload.password, payload.role
    )
    logger.info(f"Registered {user['role']} {user['_id']}")
    return user

@router.post("/signin", response_model=TokenOut)
async def signin(payload: UserSignin, db: Database = Depends(get_db)):
    user = await run_in_threadpool(users.authenticate, db, payload.user_email, payload.password)
    if not user:
        logger.info(f"Failed sign-in for {payload.user_email}")
        raise HTTPException(status_code=401, detail="Invalid credentials",
                            headers={"WWW-Authenticate": "Bearer"})

    access_token = create_access_token({
        "sub": user["_id"],
        "role": user["role"],
        "user_name": user["user_name"],
        "user_email": user["user_email"],
    })
    return {"access_token": access_token, "token_type": "bearer", "user": user}

@router.post("/verify", response_model=VerifyOut)
async def verify(user=Depends(get_current_user)):
    return {"authenticated": True, "user": user}

@router.post("/logout")
async def logout(payload: dict = Depends(get_token_payload), r: Redis = Depends(get_redis)):
    ttl = seconds_until_expiry(payload)
    if ttl > 0:
        await r.set(blacklisted_jti_key(payload["jti"]), "true", ex=ttl)
    return {"message": "Logged out successfully"}
