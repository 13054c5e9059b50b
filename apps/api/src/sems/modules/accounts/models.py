"""
Account Models

Student, teacher and admin records. The exit-request workflow only reads
these tables; account management lives outside this service.
"""

from enum import Enum

from sqlalchemy import Index, String
from sqlalchemy.orm import Mapped, mapped_column

from sems.modules.shared import BaseModel


class Department(str, Enum):
    """Teacher departments."""

    COLLEGE = "College"
    HIGHSCHOOL = "Highschool"


# Year level stamped on every secondary student
HIGHSCHOOL_YEAR_LEVEL = "Highschool"


class Student(BaseModel):
    """A student who may submit exit requests."""

    __tablename__ = "students"

    student_id: Mapped[str] = mapped_column(String(50), unique=True, index=True, nullable=False)
    first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    last_name: Mapped[str] = mapped_column(String(100), nullable=False)

    # Course code (BSIT, STEM, ...) used to route requests to teachers
    course: Mapped[str] = mapped_column(String(50), nullable=False)
    year_level: Mapped[str] = mapped_column(String(50), nullable=False)

    email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    profile_picture: Mapped[str | None] = mapped_column(String(500), nullable=True)

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    def __repr__(self) -> str:
        return f"<Student {self.student_id} ({self.course})>"


class Teacher(BaseModel):
    """
    A teacher responsible for one course, strand or grade.

    `department` is kept as plain text: rows with an unrecognized department
    exist in legacy data and must be rejected at read time, not at load time.
    """

    __tablename__ = "teachers"

    teacher_id: Mapped[str] = mapped_column(String(50), unique=True, index=True, nullable=False)
    first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    last_name: Mapped[str] = mapped_column(String(100), nullable=False)
    department: Mapped[str] = mapped_column(String(50), nullable=False)
    position: Mapped[str] = mapped_column(String(50), nullable=False)
    email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    profile_picture: Mapped[str | None] = mapped_column(String(500), nullable=True)

    __table_args__ = (Index("ix_teachers_department_position", "department", "position"),)

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    def __repr__(self) -> str:
        return f"<Teacher {self.teacher_id} ({self.department}/{self.position})>"


class Admin(BaseModel):
    """A school administrator. Every admin receives new-request notifications."""

    __tablename__ = "admins"

    admin_id: Mapped[str] = mapped_column(String(50), unique=True, index=True, nullable=False)
    first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    last_name: Mapped[str] = mapped_column(String(100), nullable=False)
    email: Mapped[str | None] = mapped_column(String(255), nullable=True)

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    def __repr__(self) -> str:
        return f"<Admin {self.admin_id}>"
