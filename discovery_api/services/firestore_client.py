"""
Shared Firebase/Firestore setup for the Firestore-backed stores.

One firebase_admin app per process; each store gets an AsyncClient built from
the same service account so request-time reads can run under asyncio.gather.
"""

import json
import logging
from pathlib import Path
from typing import Optional, Union

import firebase_admin
from firebase_admin import credentials
from google.cloud.firestore import AsyncClient
from google.oauth2 import service_account

logger = logging.getLogger(__name__)


def project_id_from_credentials_file(credentials_path: Union[Path, str]) -> Optional[str]:
    """Read project_id from a Google service account JSON file if present."""
    path = Path(credentials_path)
    if not path.is_file():
        return None
    try:
        with open(path) as f:
            data = json.load(f)
    except (json.JSONDecodeError, OSError) as e:
        logger.warning("[firestore] CREDENTIALS_UNREADABLE path=%s error=%s", path, e)
        return None
    return data.get("project_id") or data.get("projectId")


def ensure_firebase_app(
    credentials_path: Optional[Union[Path, str]] = None,
    project_id: Optional[str] = None,
) -> None:
    """Initialize the default firebase_admin app once per process."""
    if firebase_admin._apps:
        return
    opts = {"projectId": project_id} if project_id else None
    if credentials_path:
        cred = credentials.Certificate(str(Path(credentials_path).resolve()))
        firebase_admin.initialize_app(cred, opts)
    else:
        firebase_admin.initialize_app(options=opts)


def create_async_client(
    credentials_path: Union[Path, str],
    project_id: Optional[str] = None,
) -> AsyncClient:
    """AsyncClient for the service account; project inferred from the key file when unset."""
    if not credentials_path:
        raise ValueError("Async Firestore requires credentials_path")
    ensure_firebase_app(credentials_path, project_id)
    resolved = str(Path(credentials_path).resolve())
    creds = service_account.Credentials.from_service_account_file(resolved)
    proj = project_id or project_id_from_credentials_file(resolved)
    client = AsyncClient(project=proj, credentials=creds)
    logger.info("[firestore] ASYNC_CLIENT_READY project=%s", proj or "inferred")
    return client
