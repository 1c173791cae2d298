import io

import pandas as pd
import pytest
from fastapi.testclient import TestClient

from edufiles.catalog.db import FileCatalog
from edufiles.core.config import UploadSettings
from edufiles.core.security import create_access_token
from edufiles.main import create_app
from edufiles.storage.blob_store import BlobStore
from edufiles.uploads.orchestrator import UploadOrchestrator
from edufiles.uploads.policy import AcceptancePolicy

XLSX = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


@pytest.fixture
def settings(tmp_path):
    return UploadSettings.for_base_path(tmp_path)


@pytest.fixture
def policy(settings):
    return AcceptancePolicy(settings)


@pytest.fixture
def store(settings):
    return BlobStore(settings.storage_root)


@pytest.fixture
def catalog(settings):
    return FileCatalog(settings.catalog_path)


@pytest.fixture
def orchestrator(settings, policy, store, catalog):
    return UploadOrchestrator(settings, policy, store, catalog)


@pytest.fixture
def imported():
    """Records handed to the import sink, in order."""
    return []


@pytest.fixture
def app(settings, imported):
    return create_app(settings, sink=lambda kind, record: imported.append((kind.value, record)))


@pytest.fixture
def client(app):
    with TestClient(app) as c:
        yield c


@pytest.fixture
def auth_headers():
    token = create_access_token({"sub": "teacher@example.com", "user_id": "u-42"})
    return {"Authorization": f"Bearer {token}"}


def blobs(settings):
    root = settings.storage_root
    if not root.exists():
        return []
    return sorted(p.name for p in root.iterdir() if p.is_file())


def xlsx_bytes(rows, columns=None) -> bytes:
    buf = io.BytesIO()
    pd.DataFrame(rows, columns=columns).to_excel(buf, index=False)
    return buf.getvalue()
