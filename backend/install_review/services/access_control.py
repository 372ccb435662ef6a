from sqlalchemy.orm import Session

from install_review.config import settings
from install_review.database import atomic
from install_review.exceptions import NotFound, PermissionDenied
from install_review.models.role import SUPERVISOR, Role, UserRole


class AccessControl:
    """Answers "does user U hold role R?" from the user_roles table.

    ``bypass`` disables :meth:`ensure_role` for local development; it defaults
    to the ``dev_noauth`` setting and may be toggled on the instance.
    """

    def __init__(self, db: Session, bypass: bool | None = None):
        self.db = db
        self.bypass = settings.dev_noauth if bypass is None else bypass

    def has_role(self, user_id: int, role_code: str) -> bool:
        row = (
            self.db.query(UserRole.user_id)
            .join(UserRole.role)
            .filter(UserRole.user_id == user_id, Role.code == role_code)
            .first()
        )
        return row is not None

    def ensure_role(self, user_id: int, role_code: str) -> None:
        if self.bypass:
            return
        if not self.has_role(user_id, role_code):
            raise PermissionDenied(f"User {user_id} does not hold role {role_code}")

    def ensure_any_role(self, user_id: int, *role_codes: str) -> None:
        if self.bypass:
            return
        if not any(self.has_role(user_id, code) for code in role_codes):
            raise PermissionDenied(f"User {user_id} holds none of the roles {', '.join(role_codes)}")

    def users_with_role(self, role_code: str) -> list[int]:
        rows = (
            self.db.query(UserRole.user_id)
            .join(UserRole.role)
            .filter(Role.code == role_code)
            .distinct()
            .order_by(UserRole.user_id)
            .all()
        )
        return [row[0] for row in rows]

    def supervisor_ids(self) -> list[int]:
        return self.users_with_role(SUPERVISOR)

    def grant_role(self, user_id: int, role_code: str) -> None:
        with atomic(self.db):
            role = self._get_role(role_code)
            exists = self.db.query(UserRole).filter_by(user_id=user_id, role_id=role.id).first()
            if not exists:
                self.db.add(UserRole(user_id=user_id, role_id=role.id))

    def revoke_role(self, user_id: int, role_code: str) -> None:
        with atomic(self.db):
            role = self._get_role(role_code)
            self.db.query(UserRole).filter_by(user_id=user_id, role_id=role.id).delete()

    def _get_role(self, role_code: str) -> Role:
        role = self.db.query(Role).filter_by(code=role_code).first()
        if not role:
            raise NotFound(f"Role {role_code} not found")
        return role
