"""Session identifiers: short shareable tokens carried in a `?room=<id>` query parameter."""

import secrets
import string
from typing import Optional
from urllib.parse import parse_qs, urlencode, urlsplit

QUERY_PARAMETER = "room"
ID_ALPHABET = string.ascii_uppercase + string.digits
ID_LENGTH = 6


def new_session_id() -> str:
    return "".join(secrets.choice(ID_ALPHABET) for _ in range(ID_LENGTH))


def session_id_from_query(url_or_query: str) -> Optional[str]:
    """Read the session identifier from a full link ('https://host/?room=ABC123') or a bare query ('room=ABC123')."""
    query = urlsplit(url_or_query).query if "?" in url_or_query else url_or_query
    values = parse_qs(query).get(QUERY_PARAMETER)
    if not values or not values[0].strip():
        return None
    return values[0].strip()


def share_link(base_url: str, session_id: str) -> str:
    """Link a second participant can open to join the session."""
    return f"{base_url.split('?', 1)[0]}?{urlencode({QUERY_PARAMETER: session_id})}"
