from pathlib import Path
import json

from loguru import logger

# === PATH CONFIGURATION ===
DATA_DIR = Path("data")
MEDIA_ITEMS_DIR = DATA_DIR / "images"
TAKEOUTS_DIR = DATA_DIR / "takeouts"
LOCAL_IMPORT_DIR = DATA_DIR / "ReadyForImport"
LOG_DIR = DATA_DIR / "logs"

CATALOG_FILE = DATA_DIR / "catalog.json"
CONFIG_FILE = Path("sync_config.json")
CREDENTIALS_FILE = DATA_DIR / "credentials.json"
TOKEN_FILE = DATA_DIR / "token.json"

# === SCOPES ===
# album reads and batchGet, plus uploads of new items
SCOPES = [
    "https://www.googleapis.com/auth/photoslibrary.readonly",
    "https://www.googleapis.com/auth/photoslibrary.appendonly",
]

# === GOOGLE PHOTOS LIMITS ===
BATCH_GET_LIMIT = 50
ALBUM_PAGE_SIZE = 100
ALBUM_LIST_PAGE_SIZE = 50

# Concurrent byte downloads; independent of BATCH_GET_LIMIT
DOWNLOAD_CONCURRENCY = 8

# === KEYWORD TREE ===
ROOT_KEYWORD_ID = "rootKeywordId"
ROOT_KEYWORD_NODE_ID = "rootKeywordNodeId"
PEOPLE_KEYWORD_ID = "peopleKeywordId"
PEOPLE_KEYWORD_NODE_ID = "peopleKeywordNodeId"

DEFAULT_CONFIG = {
    "downloadConcurrency": DOWNLOAD_CONCURRENCY,
    "batchGetLimit": BATCH_GET_LIMIT,
    "mediaItemsDir": str(MEDIA_ITEMS_DIR),
    "takeoutsDir": str(TAKEOUTS_DIR),
    "localImportDir": str(LOCAL_IMPORT_DIR),
    "credentialsFile": str(CREDENTIALS_FILE),
    "tokenFile": str(TOKEN_FILE),
    "logLevel": "INFO",
}


def load_user_config(config_file: Path = CONFIG_FILE) -> dict:
    """
    Load the user's sync_config.json, merged over DEFAULT_CONFIG.
    Fallback to defaults if not found.
    """
    config = dict(DEFAULT_CONFIG)
    if config_file.exists():
        with open(config_file, "r") as f:
            config.update(json.load(f))
    else:
        logger.info(f"Config file '{config_file}' not found. Using defaults.")
    return config
