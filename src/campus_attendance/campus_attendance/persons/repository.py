from __future__ import annotations

from typing import Optional, Protocol

from .model import Person


class PersonRepository(Protocol):
    """Read-only view of the people directory.

    Note: the directory itself is managed elsewhere; services depend on this
    interface only.
    """

    def get_by_id(self, person_id: int) -> Optional[Person]:
        raise NotImplementedError
