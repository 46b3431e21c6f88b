from motor.motor_asyncio import AsyncIOMotorClient
from typing import Optional
import os
from pathlib import Path
from dotenv import load_dotenv
from urllib.parse import quote_plus, urlparse, urlunparse


# ---------------------------------------------------
# LOAD .env ONLY IN LOCAL DEVELOPMENT
# ---------------------------------------------------
# Railway sets environment variable: RAILWAY_ENVIRONMENT
if not os.getenv("RAILWAY_ENVIRONMENT"):
    env_path = Path(__file__).parent.parent.parent / ".env"
    if env_path.exists():
        load_dotenv(dotenv_path=env_path)
        print("🔧 Loaded .env (local development)")
    else:
        print("⚠️ .env not found, using system environment")
else:
    print("🚀 Running on Railway, using Railway environment variables")


# Collection names shared by the models
QUIZZES = "quizzes"
QUESTIONS = "questions"
PARTICIPANTS = "participants"
QUIZ_SESSIONS = "quiz_sessions"
ADMINS = "admins"


class MongoDB:
    client: Optional[AsyncIOMotorClient] = None
    database = None


# Global DB instance
db = MongoDB()


# ---------------------------------------------------
# ESCAPE CREDENTIALS IN THE MONGODB URL
# ---------------------------------------------------
def escape_mongodb_url(url: str) -> str:
    if not url or "://" not in url:
        return url

    parsed = urlparse(url)

    # No username or password present
    if not parsed.username and not parsed.password:
        return url

    username = quote_plus(parsed.username) if parsed.username else ""
    password = quote_plus(parsed.password) if parsed.password else ""

    netloc = f"{username}:{password}@" if password else f"{username}@"
    netloc += parsed.hostname or ""
    if parsed.port:
        netloc += f":{parsed.port}"

    return urlunparse((
        parsed.scheme,
        netloc,
        parsed.path,
        parsed.params,
        parsed.query,
        parsed.fragment
    ))


# ---------------------------------------------------
# CONNECT TO MONGODB
# ---------------------------------------------------
async def connect_to_mongo():
    mongodb_url = os.getenv("MONGODB_URL")
    database_name = os.getenv("DATABASE_NAME")

    if not mongodb_url:
        raise RuntimeError("❌ MONGODB_URL is not set in environment variables.")

    if not database_name:
        raise RuntimeError("❌ DATABASE_NAME is not set in environment variables.")

    mongodb_url = escape_mongodb_url(mongodb_url)

    print("🔗 Connecting to MongoDB...")

    if mongodb_url.startswith("mongodb+srv://") or "tls=true" in mongodb_url:
        import certifi
        db.client = AsyncIOMotorClient(
            mongodb_url,
            tlsCAFile=certifi.where(),
            tlsAllowInvalidCertificates=False
        )
    else:
        db.client = AsyncIOMotorClient(mongodb_url)

    db.database = db.client[database_name]

    # Test connection
    try:
        await db.client.admin.command("ping")
        print(f"✅ Connected to MongoDB: {database_name}")
    except Exception as e:
        print(f"❌ Failed to connect to MongoDB: {e}")
        raise


# ---------------------------------------------------
# DISCONNECT
# ---------------------------------------------------
async def close_mongo_connection():
    if db.client:
        db.client.close()
        db.client = None
        db.database = None
        print("🔌 MongoDB connection closed")


# ---------------------------------------------------
# ACCESS HELPERS
# ---------------------------------------------------
def get_database():
    return db.database


def serialize_document(document: Optional[dict]) -> Optional[dict]:
    """Swap Mongo's ObjectId `_id` for a string `id`."""
    if document is None:
        return None
    document = dict(document)
    if "_id" in document:
        document["id"] = str(document.pop("_id"))
    return document
