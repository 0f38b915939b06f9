import os

from dotenv import load_dotenv
from pymongo import MongoClient
from pymongo.database import Database

from ..utilities.logger import logger
from ..utilities.setup_error import SetupError

DEFAULT_DB_NAME = "test"

# Module-level cache for the database instance
_mongo_client: MongoClient | None = None
_mongo_db: Database | None = None

def create_mongo_db() -> Database:
    """ Returns the process-wide database, connecting on first use.

    Reads MONGO_URI (required) and MONGO_DB_NAME (optional) from the environment, after loading a .env file if there is one.
    Without MONGO_DB_NAME, the database named in the URI is used, falling back to 'test'. """
    global _mongo_client, _mongo_db
    if _mongo_db is not None:
        return _mongo_db

    load_dotenv()

    MONGO_URI = os.environ.get("MONGO_URI")
    if not MONGO_URI: raise SetupError("Please set MONGO_URI in your environment variables.")

    # Initialize database
    mongo_client: MongoClient = MongoClient(MONGO_URI)
    MONGO_DB_NAME = os.environ.get("MONGO_DB_NAME")
    if MONGO_DB_NAME:
        mongo_db = mongo_client[MONGO_DB_NAME]
    else:
        mongo_db = mongo_client.get_default_database(default=DEFAULT_DB_NAME)

    logger.info(f"Connected to Mongo database '{mongo_db.name}'.")
    _mongo_client, _mongo_db = mongo_client, mongo_db
    return _mongo_db

def set_mongo_db(mongo_db: Database) -> None:
    """ Use an already constructed database instead of connecting from the environment. """
    global _mongo_client, _mongo_db
    _mongo_client = None
    _mongo_db = mongo_db

def close_mongo_db() -> None:
    """ Close the connection we opened (if any) and forget the cached database. """
    global _mongo_client, _mongo_db
    if _mongo_client is not None:
        _mongo_client.close()
    _mongo_client = None
    _mongo_db = None
