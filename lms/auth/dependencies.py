# auth/dependencies.py
import logging

from fastapi import Depends, HTTPException, status
from fastapi.concurrency import run_in_threadpool
from fastapi.security import OAuth2PasswordBearer
from redis.asyncio import Redis
from pymongo.database import Database

from lms.deps import get_redis, get_db
from lms.auth.jwt import decode_token
from lms.auth.permissions import Capability, has_capability
from lms.repos import users
from lms.services.session_keys import blacklisted_jti_key

logger = logging.getLogger(__name__)

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/signin")

async def get_token_payload(token: str = Depends(oauth2_scheme), r: Redis = Depends(get_redis)) -> dict:
    try:
        payload = decode_token(token)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=str(e),
                            headers={"WWW-Authenticate": "Bearer"})

    if await r.get(blacklisted_jti_key(payload["jti"])):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Token revoked",
                            headers={"WWW-Authenticate": "Bearer"})
    return payload

async def get_current_user(payload: dict = Depends(get_token_payload), db: Database = Depends(get_db)) -> dict:
    user = await run_in_threadpool(users.get_user_by_id, db, payload["sub"])
    if not user:
        logger.warning(f"Token subject {payload['sub']} no longer exists")
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="User not found",
                            headers={"WWW-Authenticate": "Bearer"})
    return user

def require_capability(capability: Capability):
    async def capability_checker(user: dict = Depends(get_current_user)) -> dict:
        if not has_capability(user["role"], capability):
            logger.info(f"User {user['_id']} ({user['role']}) lacks {capability.value}")
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Insufficient permissions")
        return user
    return capability_checker
