import pytest

from install_review.exceptions import NotFound, PermissionDenied
from install_review.models.role import ADMIN, SUPERVISOR, TECHNICIAN
from install_review.services.access_control import AccessControl


class TestAccessControl:
    def test_has_role(self, db):
        access = AccessControl(db)
        assert access.has_role(7, TECHNICIAN)
        assert not access.has_role(7, SUPERVISOR)
        assert access.has_role(1, ADMIN)

    def test_ensure_role(self, db):
        access = AccessControl(db)
        access.ensure_role(100, SUPERVISOR)
        with pytest.raises(PermissionDenied):
            access.ensure_role(7, SUPERVISOR)

    def test_ensure_any_role(self, db):
        access = AccessControl(db)
        access.ensure_any_role(1, SUPERVISOR, ADMIN)
        with pytest.raises(PermissionDenied):
            access.ensure_any_role(7, SUPERVISOR, ADMIN)

    def test_bypass_skips_checks(self, db):
        access = AccessControl(db, bypass=True)
        access.ensure_role(42, ADMIN)
        access.ensure_any_role(42, SUPERVISOR)
        assert not access.has_role(42, ADMIN)

    def test_supervisor_pool(self, db):
        access = AccessControl(db)
        assert access.supervisor_ids() == [100, 101]
        access.grant_role(7, SUPERVISOR)
        access.grant_role(7, SUPERVISOR)
        assert access.supervisor_ids() == [7, 100, 101]
        access.revoke_role(100, SUPERVISOR)
        assert access.supervisor_ids() == [7, 101]

    def test_unknown_role(self, db):
        with pytest.raises(NotFound):
            AccessControl(db).grant_role(7, "AUDITOR")
