"""
MongoDB Service - CRUD operations for document collections.

Collections in this database:
1. users - identity records (the credential store)
2. jobs  - job postings, read-only here

All list mutations use atomic update operators ($push, $addToSet) so
concurrent requests for the same user cannot lose each other's writes.
"""

import re
from datetime import datetime, timezone
from typing import Optional, List
from bson import ObjectId
from bson.errors import InvalidId
from pymongo import DESCENDING, ReturnDocument
from pymongo.collection import Collection
from pymongo.errors import DuplicateKeyError

from portal.core.errors import ConflictError
from portal.db.mongodb import get_collection, COLLECTIONS

# Fields never returned outside the store
SECRET_FIELDS = {"password": 0, "refresh_token": 0}

# Large descriptive job fields left out of summaries
JOB_SUMMARY_PROJECTION = {"description": 0, "impression": 0}


# ============================================================
# HELPER: Convert ObjectId to string for JSON serialization
# ============================================================

def to_object_id(value) -> Optional[ObjectId]:
    """Parse a string id; None when it is not a valid ObjectId."""
    if isinstance(value, ObjectId):
        return value
    try:
        return ObjectId(str(value))
    except (InvalidId, TypeError):
        return None


def _stringify_ids(value):
    if isinstance(value, ObjectId):
        return str(value)
    if isinstance(value, dict):
        return {k: _stringify_ids(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_stringify_ids(v) for v in value]
    return value


def serialize_doc(doc: dict) -> dict:
    """Convert MongoDB document to JSON-serializable dict (ObjectIds at any depth become strings)."""
    if doc is None:
        return None
    return _stringify_ids(doc)


def normalize_email(email: Optional[str]) -> Optional[str]:
    """Addresses are stored and looked up lowercased."""
    return email.strip().lower() if email else email


def serialize_docs(docs) -> list:
    """Convert list of MongoDB documents to JSON-serializable list."""
    return [serialize_doc(doc) for doc in docs]


def _now() -> datetime:
    return datetime.now(timezone.utc)


# ============================================================
# USERS COLLECTION
# Identity records: credentials, profile, qualifications, applied jobs
# ============================================================

class UserStore:
    """
    Handles identity storage.

    Reads return sanitized documents (no password hash, no refresh token)
    unless `include_secrets=True` is passed.
    """

    def __init__(self, collection: Collection = None):
        self.collection: Collection = collection if collection is not None else get_collection(COLLECTIONS["users"])

    def find_by_login(self, username: str = None, email: str = None) -> Optional[dict]:
        """Find a user by handle or address, secrets included (for login)."""
        clauses = []
        if username:
            clauses.append({"username": username.lower()})
        if email:
            clauses.append({"email": normalize_email(email)})
        if not clauses:
            return None
        doc = self.collection.find_one({"$or": clauses})
        return serialize_doc(doc)

    def create(self, doc: dict) -> str:
        """
        Insert a new identity.

        Args:
            doc: user fields; `password` must already be hashed

        Returns:
            MongoDB ObjectId as string

        Raises:
            ConflictError if the handle or address is already taken
        """
        now = _now()
        doc = dict(doc)
        if "email" in doc:
            doc["email"] = normalize_email(doc["email"])
        doc.setdefault("qualifications", [])
        doc.setdefault("my_applied", [])
        doc.update({"created_at": now, "updated_at": now})
        try:
            result = self.collection.insert_one(doc)
        except DuplicateKeyError:
            raise ConflictError("User with email or username already exists")
        return str(result.inserted_id)

    def find_by_id(self, user_id: str, include_secrets: bool = False) -> Optional[dict]:
        oid = to_object_id(user_id)
        if oid is None:
            return None
        projection = None if include_secrets else SECRET_FIELDS
        doc = self.collection.find_one({"_id": oid}, projection)
        return serialize_doc(doc)

    def update_fields(self, user_id: str, fields: dict) -> Optional[dict]:
        """Partial update of profile fields; returns the sanitized result."""
        oid = to_object_id(user_id)
        if oid is None:
            return None
        update = dict(fields)
        if "email" in update:
            update["email"] = normalize_email(update["email"])
        update["updated_at"] = _now()
        try:
            doc = self.collection.find_one_and_update(
                {"_id": oid},
                {"$set": update},
                projection=SECRET_FIELDS,
                return_document=ReturnDocument.AFTER,
            )
        except DuplicateKeyError:
            raise ConflictError("Email is already in use by another account")
        return serialize_doc(doc)

    # --- single-field writes, never blocked by document validation ---

    def set_refresh_token(self, user_id: str, token: str) -> bool:
        """Store a refresh token, replacing any previous one."""
        result = self.collection.update_one(
            {"_id": to_object_id(user_id)},
            {"$set": {"refresh_token": token}},
            bypass_document_validation=True,
        )
        return result.matched_count > 0

    def replace_refresh_token(self, user_id: str, presented: str, new_token: str) -> bool:
        """
        Swap `presented` for `new_token` only if `presented` is the stored value.

        Returns False when the stored token differs (superseded, reused or
        cleared by logout).
        """
        result = self.collection.update_one(
            {"_id": to_object_id(user_id), "refresh_token": presented},
            {"$set": {"refresh_token": new_token}},
            bypass_document_validation=True,
        )
        return result.matched_count > 0

    def clear_refresh_token(self, user_id: str) -> None:
        self.collection.update_one(
            {"_id": to_object_id(user_id)},
            {"$unset": {"refresh_token": 1}},
            bypass_document_validation=True,
        )

    def set_password_hash(self, user_id: str, password_hash: str) -> bool:
        result = self.collection.update_one(
            {"_id": to_object_id(user_id)},
            {"$set": {"password": password_hash, "updated_at": _now()}},
            bypass_document_validation=True,
        )
        return result.matched_count > 0

    # --- append-only lists ---

    def push_qualification(self, user_id: str, qualification: dict) -> Optional[dict]:
        """Append a qualification; None if the user does not exist."""
        oid = to_object_id(user_id)
        if oid is None:
            return None
        doc = self.collection.find_one_and_update(
            {"_id": oid},
            {"$push": {"qualifications": qualification}, "$set": {"updated_at": _now()}},
            projection=SECRET_FIELDS,
            return_document=ReturnDocument.AFTER,
        )
        return serialize_doc(doc)

    def add_applied_job(self, user_id: str, job_id: str) -> bool:
        """
        Append a job reference unless it is already present.

        Returns True when appended, False when the user is missing or has
        already applied.
        """
        job_oid = to_object_id(job_id)
        result = self.collection.update_one(
            {"_id": to_object_id(user_id), "my_applied": {"$ne": job_oid}},
            {"$addToSet": {"my_applied": job_oid}, "$set": {"updated_at": _now()}},
        )
        return result.modified_count > 0

    def get_applied_job_ids(self, user_id: str) -> Optional[List[str]]:
        oid = to_object_id(user_id)
        if oid is None:
            return None
        doc = self.collection.find_one({"_id": oid}, {"my_applied": 1})
        if doc is None:
            return None
        return [str(job_id) for job_id in doc.get("my_applied", [])]


# ============================================================
# JOBS COLLECTION
# Postings are created elsewhere; this service only reads them
# ============================================================

class JobStore:
    """Read access to job postings."""

    def __init__(self, collection: Collection = None):
        self.collection: Collection = collection if collection is not None else get_collection(COLLECTIONS["jobs"])

    def get_by_id(self, job_id: str) -> Optional[dict]:
        oid = to_object_id(job_id)
        if oid is None:
            return None
        return serialize_doc(self.collection.find_one({"_id": oid}))

    def exists(self, job_id: str) -> bool:
        oid = to_object_id(job_id)
        if oid is None:
            return False
        return self.collection.count_documents({"_id": oid}, limit=1) > 0

    def get_summaries(self, job_ids: List[str]) -> List[dict]:
        """
        Fetch job summaries (no description/impression) in the order given.
        Ids with no matching job are skipped.
        """
        oids = [oid for oid in (to_object_id(j) for j in job_ids) if oid is not None]
        if not oids:
            return []
        docs = self.collection.find({"_id": {"$in": oids}}, JOB_SUMMARY_PROJECTION)
        by_id = {str(doc["_id"]): serialize_doc(doc) for doc in docs}
        return [by_id[str(oid)] for oid in oids if str(oid) in by_id]

    def list_summaries(self, page: int = 1, page_size: int = 10, search: str = None) -> dict:
        """Paginated newest-first listing with optional title search."""
        query = {}
        if search:
            query["title"] = {"$regex": re.escape(search), "$options": "i"}

        total = self.collection.count_documents(query)
        cursor = (
            self.collection.find(query, JOB_SUMMARY_PROJECTION)
            .sort("created_at", DESCENDING)
            .skip((page - 1) * page_size)
            .limit(page_size)
        )
        return {"jobs": serialize_docs(cursor), "total": total, "page": page, "page_size": page_size}
