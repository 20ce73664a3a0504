from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..core.enums import EmploymentStatus, Position, Role


@dataclass(frozen=True)
class Person:
    """Directory entry, read-only for the engine.

    ``position`` stays a plain string: the directory may carry positions the
    engine has no rule for.
    """

    person_id: int
    full_name: str
    role: Role
    position: Optional[str] = None
    employment_status: EmploymentStatus = EmploymentStatus.ACTIVE

    @property
    def is_active(self) -> bool:
        return self.employment_status == EmploymentStatus.ACTIVE

    @property
    def is_dean(self) -> bool:
        return self.role == Role.FACULTY and self.position == Position.DEAN.value

    @property
    def is_guard(self) -> bool:
        return self.role == Role.GUARD

    @property
    def is_hr(self) -> bool:
        return self.role in {Role.HR_PERSONNEL, Role.ADMINISTRATOR}
