# config.py - Search Service Configuration
# =============================================================================

import os
from pathlib import Path
from dotenv import load_dotenv

env_path = Path(__file__).parent.parent.parent / ".env"
load_dotenv(env_path if env_path.exists() else None)

# Credentials only come from the environment, never from config.yaml
SEARCH_API_KEY = os.environ.get("SEARCH_API_KEY")

# Try to load from YAML config, fall back to defaults
try:
    from shared_config import get_config
    _config = get_config()

    SEARCH_ENDPOINT = _config.search.endpoint
    SEARCH_INDEX_NAME = _config.search.index_name
    SEARCH_FIELD_NAME = _config.search.field_name
    REQUEST_TIMEOUT = _config.search.request_timeout
    PAGE_DEPTH_LIMIT = _config.partitioning.page_depth_limit

except (ImportError, FileNotFoundError):
    # Fallback to environment if no config.yaml
    SEARCH_ENDPOINT = os.environ.get("SEARCH_ENDPOINT", "http://127.0.0.1:9200")
    SEARCH_INDEX_NAME = os.environ.get("SEARCH_INDEX_NAME")
    SEARCH_FIELD_NAME = os.environ.get("SEARCH_FIELD_NAME")
    REQUEST_TIMEOUT = float(os.environ.get("SEARCH_REQUEST_TIMEOUT", "120"))
    PAGE_DEPTH_LIMIT = int(os.environ.get("PAGE_DEPTH_LIMIT", "10000"))
