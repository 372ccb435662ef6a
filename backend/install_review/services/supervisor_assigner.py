import random

from install_review.exceptions import ConflictError
from install_review.services.access_control import AccessControl


class SupervisorAssigner:
    """Picks a reviewer uniformly at random from the current supervisor pool."""

    def __init__(self, access: AccessControl, rng: random.Random | None = None):
        self.access = access
        self.rng = rng or random.Random()

    def assign(self) -> int:
        pool = self.access.supervisor_ids()
        if not pool:
            raise ConflictError("No supervisors available")
        return self.rng.choice(pool)
