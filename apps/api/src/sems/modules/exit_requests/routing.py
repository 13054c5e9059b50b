"""
Routing Vocabulary

The closed set of course, strand and grade codes that decide which
teachers see and are notified about an exit request.

- College courses: BSIT, BSHM, ENTREP, EDUC
- Highschool strands: STEM, HUMSS, TVL, ABM
- Highschool grades: Grade 11, Grade 12
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Protocol

from sems.modules.accounts.models import HIGHSCHOOL_YEAR_LEVEL, Department, Teacher
from sems.modules.exit_requests.errors import UnrecognizedDepartmentError

logger = logging.getLogger(__name__)


class RoutingKind(str, Enum):
    """What a routing code names."""

    COURSE = "course"
    STRAND = "strand"
    GRADE = "grade"


@dataclass(frozen=True)
class RoutingKey:
    """A recognized routing code with the department that owns it."""

    department: Department
    kind: RoutingKind
    code: str


ROUTING_VOCABULARY: tuple[RoutingKey, ...] = (
    RoutingKey(Department.COLLEGE, RoutingKind.COURSE, "BSIT"),
    RoutingKey(Department.COLLEGE, RoutingKind.COURSE, "BSHM"),
    RoutingKey(Department.COLLEGE, RoutingKind.COURSE, "ENTREP"),
    RoutingKey(Department.COLLEGE, RoutingKind.COURSE, "EDUC"),
    RoutingKey(Department.HIGHSCHOOL, RoutingKind.STRAND, "STEM"),
    RoutingKey(Department.HIGHSCHOOL, RoutingKind.STRAND, "HUMSS"),
    RoutingKey(Department.HIGHSCHOOL, RoutingKind.STRAND, "TVL"),
    RoutingKey(Department.HIGHSCHOOL, RoutingKind.STRAND, "ABM"),
    RoutingKey(Department.HIGHSCHOOL, RoutingKind.GRADE, "Grade 11"),
    RoutingKey(Department.HIGHSCHOOL, RoutingKind.GRADE, "Grade 12"),
)


def normalize_code(value: str) -> str:
    """Trim, collapse inner whitespace and case-fold a course code."""
    return " ".join(value.split()).casefold()


_KEYS_BY_NORMALIZED_CODE = {normalize_code(key.code): key for key in ROUTING_VOCABULARY}


def parse_routing_key(value: str | None) -> RoutingKey | None:
    """
    Classify a course, strand or grade code.

    Returns:
        The canonical RoutingKey, or None when the code is not recognized
    """
    if not value:
        return None
    return _KEYS_BY_NORMALIZED_CODE.get(normalize_code(value))


class RoutedRecord(Protocol):
    course: str
    year_level: str


@dataclass(frozen=True)
class TeacherScope:
    """
    The slice of exit requests a teacher is responsible for.

    A request is admitted when its course equals the teacher's position;
    Highschool teachers additionally only see Highschool students.
    """

    teacher_id: str
    department: Department
    position: str

    @classmethod
    def from_teacher(cls, teacher: Teacher) -> "TeacherScope":
        """
        Build a scope from a teacher account.

        Raises:
            UnrecognizedDepartmentError: If the department is not College or Highschool
        """
        raw_department = (teacher.department or "").strip()
        try:
            department = Department(raw_department)
        except ValueError as e:
            logger.warning(
                f"Teacher {teacher.teacher_id} has unrecognized department '{raw_department}'"
            )
            raise UnrecognizedDepartmentError(raw_department) from e

        return cls(teacher_id=teacher.teacher_id, department=department, position=teacher.position)

    def admits(self, record: RoutedRecord) -> bool:
        """Whether the record falls inside this teacher's scope."""
        if record.course != self.position:
            return False
        if self.department == Department.HIGHSCHOOL:
            return record.year_level == HIGHSCHOOL_YEAR_LEVEL
        return True
