from io import BytesIO

import pytest
from fastapi.testclient import TestClient
from PIL import Image
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker

from install_review.config import settings
from install_review.database import _set_sqlite_pragmas, get_db, init_db
from install_review.main import app
from install_review.models.requirement import DEFAULT_KINDS, WORK_ORDER
from install_review.models.role import ADMIN, SUPERVISOR, TECHNICIAN
from install_review.services.access_control import AccessControl
from install_review.services.application_service import ApplicationLifecycle
from install_review.services.attachment_service import AttachmentService
from install_review.services.blob_store import BlobStore
from install_review.utils.filesystem import ensure_storage_dirs

TECHNICIAN_ID = 7
OTHER_TECHNICIAN_ID = 8
SUPERVISOR_IDS = (100, 101)
ADMIN_ID = 1


@pytest.fixture
def tmp_data(tmp_path):
    data_path = tmp_path / "InstallReview"
    data_path.mkdir()
    return data_path


@pytest.fixture
def test_db(tmp_data):
    db_path = tmp_data / "db.sqlite"
    engine = create_engine(
        f"sqlite:///{db_path}",
        connect_args={"check_same_thread": False},
    )
    event.listen(engine, "connect", _set_sqlite_pragmas)
    TestSession = sessionmaker(bind=engine, autoflush=False, autocommit=False)

    init_db(db_path)

    session = TestSession()
    access = AccessControl(session)
    access.grant_role(TECHNICIAN_ID, TECHNICIAN)
    access.grant_role(OTHER_TECHNICIAN_ID, TECHNICIAN)
    for supervisor_id in SUPERVISOR_IDS:
        access.grant_role(supervisor_id, SUPERVISOR)
    access.grant_role(ADMIN_ID, ADMIN)
    session.close()

    def override_get_db():
        db = TestSession()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestSession
    app.dependency_overrides.clear()
    engine.dispose()


@pytest.fixture
def db(test_db):
    session = test_db()
    yield session
    session.close()


@pytest.fixture
def blob_store(tmp_data):
    return BlobStore(ensure_storage_dirs(tmp_data / "storage"))


@pytest.fixture
def client(tmp_data, test_db):
    original_data_path = settings.data_path
    settings.data_path = tmp_data
    ensure_storage_dirs(settings.storage_path)
    app.state.catalog_cache.clear()
    c = TestClient(app)
    yield c
    settings.data_path = original_data_path


def png_bytes(color=(200, 30, 30), size=(40, 30)) -> bytes:
    buffer = BytesIO()
    Image.new("RGB", size, color).save(buffer, "PNG")
    return buffer.getvalue()


@pytest.fixture
def applicant():
    return {
        "client_code": "INS-0042",
        "first_names": "Maria Elena",
        "last_names": "Gomez Rios",
        "document_type": "CC",
        "document_number": "1032456789",
        "address": "Calle 45 # 12-30",
        "neighborhood": "Chapinero",
        "email": "maria.gomez@example.com",
        "contact_number": "3001234567",
        "stratum": 3,
        "locality_code": "11001",
    }


@pytest.fixture
def lifecycle(db, blob_store):
    return ApplicationLifecycle(db, blob_store=blob_store)


@pytest.fixture
def attachments(db, blob_store):
    return AttachmentService(db, blob_store=blob_store)


@pytest.fixture
def attach_required(attachments):
    """Attach one file for every seeded requirement kind."""
    def attach(application_id, user_id=TECHNICIAN_ID, kinds=DEFAULT_KINDS):
        for kind in kinds:
            if kind == WORK_ORDER:
                attachments.add(application_id, user_id, kind, "work_order.pdf", b"%PDF-1.4 order", "application/pdf")
            else:
                attachments.add(application_id, user_id, kind, f"{kind.lower()}.png", png_bytes(), "image/png")

    return attach


@pytest.fixture
def make_png():
    return png_bytes
