import json
import os
from typing import Any

APP_TITLE = "OpenClique API"
JWT_SECRET = os.getenv("JWT_SECRET", "")
JWT_AUDIENCE = os.getenv("JWT_AUDIENCE", "authenticated")
DEV_MODE = os.getenv("DEV_MODE", "false").lower() == "true"
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
AUTO_CREATE_SCHEMA = os.getenv("AUTO_CREATE_SCHEMA", "false").lower() == "true"

CORS_ORIGINS = [
    origin.strip()
    for origin in os.getenv("CORS_ORIGINS", "http://localhost:5173,http://127.0.0.1:5173,http://localhost:8080").split(",")
    if origin.strip()
]

FEED_QUEST_STATUS = os.getenv("FEED_QUEST_STATUS", "open")
FEED_REVIEW_STATUS = os.getenv("FEED_REVIEW_STATUS", "approved")

DEFAULT_MATCHING_CONFIG: dict[str, Any] = {
    "NEUTRAL_MATCH_SCORE": int(os.getenv("NEUTRAL_MATCH_SCORE", "50")),
    "MIN_AGE_21_PLUS": 21,
    "MIN_AGE_18_PLUS": 18,
}

if os.getenv("MATCHING_CONFIG_JSON"):
    try:
        DEFAULT_MATCHING_CONFIG.update(json.loads(os.getenv("MATCHING_CONFIG_JSON", "{}")))
    except json.JSONDecodeError:
        pass
