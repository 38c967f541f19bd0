from __future__ import annotations

import logging
from typing import Sequence

from ..common.permissions import require_admin
from ..common.validators import require_non_empty
from ..core.enums import Role
from ..core.exceptions import NotFoundError, ValidationError
from ..records.repository import RecordRepository
from .model import Center
from .repository import CenterRepository

logger = logging.getLogger(__name__)


class CenterService:
    """Use case: manage the center lookup table.

    Students and records keep the center *name*, so a rename does not reach
    existing rows.
    """

    def __init__(self, centers: CenterRepository, records: RecordRepository):
        self._centers = centers
        self._records = records

    def list_centers(self) -> Sequence[Center]:
        return sorted(self._centers.list_all(), key=lambda c: c.name.lower())

    def get_center(self, center_id: int) -> Center:
        center = self._centers.get_by_id(int(center_id))
        if not center:
            raise NotFoundError("Center not found")
        return center

    def create_center(self, *, current_role: Role, name: str) -> Center:
        require_admin(current_role)
        name = require_non_empty(name, "Center name")

        if self._centers.find_by_name(name):
            raise ValidationError("Center already exists")

        return self.get_center(self._centers.create(name))

    def rename_center(self, *, current_role: Role, center_id: int, name: str) -> Center:
        require_admin(current_role)
        name = require_non_empty(name, "Center name")
        center = self.get_center(center_id)

        clash = self._centers.find_by_name(name)
        if clash and clash.center_id != center.center_id:
            raise ValidationError("Center name already exists")

        self._centers.rename(center.center_id, name)
        if center.name != name:
            logger.warning("Center %r renamed to %r; existing student/record references keep the old name", center.name, name)
        return self.get_center(center.center_id)

    def delete_center(self, *, current_role: Role, center_id: int) -> Center:
        require_admin(current_role)
        center = self.get_center(center_id)

        in_use = self._records.count_by_center(center.name)
        if in_use > 0:
            raise ValidationError(
                f"Cannot delete center. It is being used in {in_use} record(s). Please delete the records first."
            )

        self._centers.delete(center.center_id)
        return center
