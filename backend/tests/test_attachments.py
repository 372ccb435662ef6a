import pytest

from install_review.exceptions import NotFound, PermissionDenied, ValidationError
from install_review.services.attachment_service import AttachmentService, normalize_kind
from install_review.utils.hashing import sha256_bytes

TECHNICIAN = 7
OTHER_TECHNICIAN = 8
SUPERVISOR = 100
ADMIN = 1


class TestNormalizeKind:
    @pytest.mark.parametrize("raw,expected", [
        ("facade_photo", "FACADE_PHOTO"),
        ('"WORK_ORDER"', "WORK_ORDER"),
        ("  'nomenclature_photo' ", "NOMENCLATURE_PHOTO"),
        ("CAPTURE", "SPEED_TEST_PHOTO"),
        ("capture_test", "SPEED_TEST_PHOTO"),
        ("", ""),
        (None, ""),
    ])
    def test_normalize(self, raw, expected):
        assert normalize_kind(raw) == expected


class TestAttachmentService:
    @pytest.fixture
    def application(self, lifecycle, applicant):
        return lifecycle.create(applicant, TECHNICIAN)

    def test_owner_uploads(self, attachments, blob_store, application, make_png):
        content = make_png()
        attachment = attachments.add(application.id, TECHNICIAN, "capture", "../../speed test.png", content, "image/png")

        assert attachment.kind == "SPEED_TEST_PHOTO"
        assert attachment.file_name == "speed_test.png"
        assert attachment.byte_size == len(content)
        assert attachment.sha256 == sha256_bytes(content)
        assert attachment.uploaded_by == TECHNICIAN
        assert attachment.storage_path == f"files/{application.id}/{attachment.sha256[:8]}_speed_test.png"
        assert blob_store.read(attachment.storage_path) == content

    def test_supervisor_and_admin_may_attach(self, attachments, application):
        attachments.add(application.id, SUPERVISOR, "WORK_ORDER", "order.pdf", b"%PDF-1.4")
        attachments.add(application.id, ADMIN, "WORK_ORDER", "order2.pdf", b"%PDF-1.4 second")
        assert len(attachments.list_for(application.id)) == 2

    def test_other_technician_is_denied(self, attachments, application):
        with pytest.raises(PermissionDenied):
            attachments.add(application.id, OTHER_TECHNICIAN, "WORK_ORDER", "order.pdf", b"%PDF")

    def test_user_without_roles_is_denied(self, attachments, application):
        with pytest.raises(PermissionDenied):
            attachments.add(application.id, 555, "WORK_ORDER", "order.pdf", b"%PDF")

    def test_empty_file(self, attachments, application):
        with pytest.raises(ValidationError):
            attachments.add(application.id, TECHNICIAN, "WORK_ORDER", "order.pdf", b"")

    def test_missing_kind(self, attachments, application):
        with pytest.raises(ValidationError):
            attachments.add(application.id, TECHNICIAN, "  ", "order.pdf", b"%PDF")

    def test_too_large(self, db, blob_store, application):
        service = AttachmentService(db, blob_store=blob_store, max_bytes=10)
        with pytest.raises(ValidationError):
            service.add(application.id, TECHNICIAN, "WORK_ORDER", "order.pdf", b"x" * 11)

    def test_unknown_application(self, attachments):
        with pytest.raises(NotFound):
            attachments.add(404, TECHNICIAN, "WORK_ORDER", "order.pdf", b"%PDF")

    def test_uncatalogued_kind_is_kept(self, attachments, application):
        attachment = attachments.add(application.id, TECHNICIAN, "signal_map", "map.pdf", b"%PDF")
        assert attachment.kind == "SIGNAL_MAP"

    def test_list_and_read(self, attachments, application):
        first = attachments.add(application.id, TECHNICIAN, "WORK_ORDER", "a.pdf", b"first")
        second = attachments.add(application.id, TECHNICIAN, "FACADE_PHOTO", "b.jpg", b"second")
        assert [a.id for a in attachments.list_for(application.id)] == [first.id, second.id]

        attachment, content = attachments.read(application.id, second.id)
        assert attachment.file_name == "b.jpg"
        assert content == b"second"

        with pytest.raises(NotFound):
            attachments.read(application.id + 1, second.id)
