from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import Office


class OfficeRepository(Protocol):
    """Read-only office lookup used by the attendance engine and reports.

    Offices are created and edited by the admin screens, never here.
    """

    def get_by_id(self, office_id: int) -> Optional[Office]:
        raise NotImplementedError

    def list_active(self) -> Sequence[Office]:
        """Active offices ordered by name."""

        raise NotImplementedError
