import os
from typing import Optional

import httpx

from app.logging_config import get_logger

logger = get_logger("backup_service")

BACKUP_API_URL = os.environ.get("BACKUP_API_URL")
BACKUP_TIMEOUT_SECONDS = float(os.environ.get("BACKUP_TIMEOUT_SECONDS", "10"))

BACKUP_PREFIX = "🔄 "
BACKUP_UNAVAILABLE_RESPONSE = "Sorry, our main AI is temporarily down, but I'm still here! Try asking something else."


def fetch_backup_mapping() -> Optional[dict]:
    """GET the static phrase -> response mapping. None when the backup is unreachable."""
    if not BACKUP_API_URL:
        logger.info("Backup API not configured")
        return None

    try:
        with httpx.Client(timeout=BACKUP_TIMEOUT_SECONDS) as client:
            response = client.get(BACKUP_API_URL, headers={"Content-Type": "application/json"})
    except httpx.HTTPError as e:
        logger.warning(f"Backup API request failed: {e}")
        return None

    if not response.is_success:
        logger.warning(f"Backup API error: {response.status_code}")
        return None

    try:
        data = response.json()
    except ValueError as e:
        logger.warning(f"Backup API returned invalid JSON: {e}")
        return None

    if not isinstance(data, dict):
        logger.warning(f"Backup API returned {type(data).__name__}, expected object")
        return None
    return data


def find_backup_response(mapping: dict, message: str) -> str:
    """Exact phrase, else first phrase containing or contained in the message, else a notice."""
    content = (message or "").lower().strip()

    exact = mapping.get(content)
    if exact:
        return str(exact)

    for phrase, response in mapping.items():
        phrase_lower = str(phrase).lower()
        if phrase_lower in content or content in phrase_lower:
            return str(response)

    return BACKUP_UNAVAILABLE_RESPONSE
