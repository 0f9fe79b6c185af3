# repos/orders.py
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from bson import ObjectId
from bson.errors import InvalidId
from pymongo import ASCENDING, DESCENDING
from pymongo.database import Database
from pymongo import ReturnDocument

PENDING = "pending"
COMPLETED = "completed"
FAILED = "failed"
TERMINAL_STATUSES = (COMPLETED, FAILED)

def _oid(id_str: str) -> Optional[ObjectId]:
    try:
        return ObjectId(id_str)
    except (InvalidId, TypeError):
        return None

def _serialize(doc: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    if not doc:
        return None
    doc["_id"] = str(doc["_id"])
    return doc

def ensure_indexes(db: Database) -> None:
    db.orders.create_index([("student_id", ASCENDING), ("created_at", DESCENDING)], name="student_orders")
    db.orders.create_index([("external_payment_id", ASCENDING)], unique=True, name="external_payment_unique")
    db.orders.create_index([("status", ASCENDING), ("enrollment_applied", ASCENDING)], name="reconcile")

def insert_order(db: Database, data: Dict[str, Any]) -> Dict[str, Any]:
    now = datetime.now(timezone.utc)
    doc = {
        **data,
        "status": PENDING,
        "enrollment_applied": False,
        "failure_reason": None,
        "created_at": now,
        "updated_at": now,
        "completed_at": None,
    }
    result = db.orders.insert_one(doc)
    doc["_id"] = str(result.inserted_id)
    return doc

def get_order(db: Database, order_id: str) -> Optional[Dict[str, Any]]:
    oid = _oid(order_id)
    if oid is None:
        return None
    return _serialize(db.orders.find_one({"_id": oid}))

def transition(db: Database, order_id: str, status: str, *, failure_reason: Optional[str] = None) -> Optional[Dict[str, Any]]:
    """
    Move a pending order to ``status``.

    The filter only matches pending orders, so a terminal order is never
    rewritten. Returns the updated order, or None when the order was not
    pending anymore.
    """
    if status not in TERMINAL_STATUSES:
        raise ValueError(f"Cannot transition an order to {status}")
    now = datetime.now(timezone.utc)
    patch: Dict[str, Any] = {"status": status, "updated_at": now}
    if status == COMPLETED:
        patch["completed_at"] = now
    else:
        patch["failure_reason"] = failure_reason
    doc = db.orders.find_one_and_update(
        {"_id": ObjectId(order_id), "status": PENDING},
        {"$set": patch},
        return_document=ReturnDocument.AFTER,
    )
    return _serialize(doc)

def mark_enrollment_applied(db: Database, order_id: str) -> None:
    db.orders.update_one(
        {"_id": ObjectId(order_id), "status": COMPLETED},
        {"$set": {"enrollment_applied": True, "updated_at": datetime.now(timezone.utc)}},
    )

def list_unreconciled(db: Database, limit: int = 100) -> List[Dict[str, Any]]:
    cursor = db.orders.find({"status": COMPLETED, "enrollment_applied": False}).sort("completed_at", ASCENDING).limit(limit)
    return [_serialize(doc) for doc in cursor]

def has_open_orders(db: Database, course_id: str) -> bool:
    """True while a pending or completed order points at ``course_id``."""
    query = {"course_id": course_id, "status": {"$in": [PENDING, COMPLETED]}}
    return db.orders.find_one(query, {"_id": 1}) is not None
