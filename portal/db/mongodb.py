"""
MongoDB Connection Utility

MongoDB stores:
- users: identity records (credentials, profile, qualifications, applied jobs)
- jobs: job postings (read-only for this service)
"""
import logging

from pymongo import ASCENDING, DESCENDING, MongoClient
from pymongo.collection import Collection
from pymongo.database import Database
from pymongo.errors import CollectionInvalid

from portal.core.config import get_settings

logger = logging.getLogger(__name__)

# Global client (connection pooling handled internally by pymongo)
_client: MongoClient = None
_db: Database = None

# Collection name constants (avoid typos)
COLLECTIONS = {
    "users": "users",
    "jobs": "jobs",
}

# Required-field validator for users. Single-field token/password writes pass
# bypass_document_validation=True so they are never blocked by it.
USER_VALIDATOR = {
    "$jsonSchema": {
        "bsonType": "object",
        "required": ["username", "email", "fullname", "password"],
        "properties": {
            "username": {"bsonType": "string", "minLength": 1},
            "email": {"bsonType": "string", "minLength": 1},
            "fullname": {"bsonType": "string", "minLength": 1},
            "password": {"bsonType": "string", "minLength": 1},
            "qualifications": {"bsonType": "array"},
            "my_applied": {"bsonType": "array"},
        },
    }
}


def get_mongo_client() -> MongoClient:
    """Get or create MongoDB client (singleton pattern)"""
    global _client
    if _client is None:
        _client = MongoClient(get_settings().mongodb_uri)
    return _client


def get_mongo_db() -> Database:
    """Get the portal database"""
    global _db
    if _db is None:
        client = get_mongo_client()
        _db = client[get_settings().mongodb_db]
    return _db


def get_collection(name: str) -> Collection:
    db = get_mongo_db()
    return db[name]


def test_mongo_connection() -> bool:
    """
    Test if MongoDB is reachable.
    Returns True if connection successful, False otherwise.
    """
    try:
        client = get_mongo_client()
        # ping command checks connection
        client.admin.command('ping')
        return True
    except Exception:
        logger.warning("MongoDB connection failed", exc_info=True)
        return False


def ensure_user_validator(db: Database) -> None:
    """Create the users collection with its validator, or attach it."""
    try:
        db.create_collection(COLLECTIONS["users"], validator=USER_VALIDATOR)
    except CollectionInvalid:
        # Already exists
        db.command("collMod", COLLECTIONS["users"], validator=USER_VALIDATOR)


def init_mongo_indexes():
    """
    Create indexes and validators.
    Call this once during app startup.
    """
    db = get_mongo_db()
    ensure_user_validator(db)

    # Handle and contact address are globally unique
    db[COLLECTIONS["users"]].create_index([("username", ASCENDING)], unique=True)
    db[COLLECTIONS["users"]].create_index([("email", ASCENDING)], unique=True)

    # Newest-first job listing
    db[COLLECTIONS["jobs"]].create_index([("created_at", DESCENDING)])

    logger.info("MongoDB indexes created")
