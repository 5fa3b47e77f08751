"""HTTP session factory."""

from typing import Dict, Optional

import requests

DEFAULT_HEADERS = {"accept": "application/json"}


def create_session(headers: Optional[Dict[str, str]] = None) -> requests.Session:
    """Create a requests session with JSON accept headers.

    No retry adapter is mounted: a failed lookup is reported once to the caller.
    """
    session = requests.Session()
    session.headers.update(DEFAULT_HEADERS)
    if headers:
        session.headers.update(headers)
    return session
