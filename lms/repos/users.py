# repos/users.py
from datetime import datetime, timezone
from typing import Optional

from bson import ObjectId
from bson.errors import InvalidId
from passlib.context import CryptContext
from pymongo.database import Database
from pymongo.errors import DuplicateKeyError

from lms.errors import ConflictError

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

PUBLIC_FIELDS = {"password": 0}

def hash_password(password: str) -> str:
    return pwd_context.hash(password)

def verify_password(password: str, hashed: str) -> bool:
    return pwd_context.verify(password, hashed)

def _public(user: dict) -> dict:
    user = {k: v for k, v in user.items() if k != "password"}
    user["_id"] = str(user["_id"])
    return user

def create_user(db: Database, user_name: str, user_email: str, password: str, role: str) -> dict:
    if db.users.find_one({"$or": [{"user_email": user_email}, {"user_name": user_name}]}):
        raise ConflictError("User name or user email already exists")
    user = {
        "user_name": user_name,
        "user_email": user_email,
        "password": hash_password(password),
        "role": role,
        "created_at": datetime.now(timezone.utc),
    }
    try:
        result = db.users.insert_one(user)
    except DuplicateKeyError:
        # lost a race with a concurrent signup for the same email
        raise ConflictError("User name or user email already exists")
    user["_id"] = result.inserted_id
    return _public(user)

def get_user_by_email(db: Database, user_email: str) -> Optional[dict]:
    """Returns the raw document, password hash included."""
    return db.users.find_one({"user_email": user_email})

def get_user_by_id(db: Database, user_id: str) -> Optional[dict]:
    try:
        oid = ObjectId(user_id)
    except (InvalidId, TypeError):
        return None
    user = db.users.find_one({"_id": oid}, PUBLIC_FIELDS)
    return _public(user) if user else None

def authenticate(db: Database, user_email: str, password: str) -> Optional[dict]:
    user = get_user_by_email(db, user_email)
    if not user or not verify_password(password, user["password"]):
        return None
    return _public(user)

def ensure_indexes(db: Database):
    db.users.create_index("user_email", unique=True)
    db.users.create_index("user_name", unique=True)
