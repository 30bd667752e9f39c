from __future__ import annotations

from typing import Iterable, Optional, Sequence

from .model import Office
from .repository import OfficeRepository


class InMemoryOfficeRepository(OfficeRepository):
    def __init__(self, offices: Iterable[Office] = ()):
        self._by_id: dict[int, Office] = {o.office_id: o for o in offices}

    def get_by_id(self, office_id: int) -> Optional[Office]:
        return self._by_id.get(int(office_id))

    def list_active(self) -> Sequence[Office]:
        return sorted((o for o in self._by_id.values() if o.is_active), key=lambda o: o.name)

    def save(self, office: Office) -> None:
        self._by_id[office.office_id] = office

    def remove(self, office_id: int) -> bool:
        return self._by_id.pop(int(office_id), None) is not None
