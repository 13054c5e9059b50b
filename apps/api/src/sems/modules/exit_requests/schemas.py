"""
Exit Request Schemas

Pydantic schemas for request validation and response serialization.
JSON fields are camelCase; `studentID` and `teacherID` keep their
capitalized suffix.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from sems.modules.exit_requests.models import RequestStatus
from sems.modules.exit_requests.state_machine import Decision
from sems.modules.exit_requests.visibility import ExitRequestView


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ExitRequestCreate(CamelModel):
    """Body of a new exit request. Identity and course come from the student account."""

    student_id: str = Field(..., alias="studentID", min_length=1, max_length=50)
    reason_for_exit: str = Field(..., min_length=1, max_length=2000)
    date: str = Field(..., min_length=1, max_length=50)
    time: str = Field(..., min_length=1, max_length=50)
    emergency_contact: str = Field(..., min_length=1, max_length=100)
    guard_name: str = Field(..., min_length=1, max_length=200)

    @field_validator("student_id")
    @classmethod
    def strip_student_id(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("studentID must not be blank")
        return v


class DecisionRequest(CamelModel):
    """
    Body of a decision. A present `teacherID` makes this a teacher decision;
    otherwise it is an admin decision.
    """

    status: Decision
    admin_response: str = Field("", max_length=2000)
    teacher_id: str | None = Field(None, alias="teacherID", max_length=50)
    teacher_response: str = Field("", max_length=2000)

    @field_validator("teacher_id")
    @classmethod
    def blank_teacher_id_is_admin(cls, v: str | None) -> str | None:
        if v is None:
            return None
        v = v.strip()
        return v or None


class AdminApproval(CamelModel):
    approved: bool
    admin_response: str
    responded_at: datetime | None


class TeacherApproval(CamelModel):
    approved: bool
    teacher_id: str = Field(..., alias="teacherID")
    teacher_response: str
    responded_at: datetime | None


class ExitRequestResponse(CamelModel):
    """An exit request as seen by API clients."""

    id: str
    student_id: str = Field(..., alias="studentID")
    first_name: str
    last_name: str
    course: str
    year_level: str
    reason_for_exit: str
    date: str
    time: str
    emergency_contact: str
    guard_name: str
    status: RequestStatus
    submitted_at: datetime
    admin_approval: AdminApproval
    teacher_approval: TeacherApproval
    profile_picture: str | None = None

    @classmethod
    def from_view(cls, view: ExitRequestView) -> "ExitRequestResponse":
        r = view.record
        return cls(
            id=str(r.id),
            student_id=r.student_id,
            first_name=r.first_name,
            last_name=r.last_name,
            course=r.course,
            year_level=r.year_level,
            reason_for_exit=r.reason_for_exit,
            date=r.exit_date,
            time=r.exit_time,
            emergency_contact=r.emergency_contact,
            guard_name=r.guard_name,
            status=r.status,
            submitted_at=r.submitted_at,
            admin_approval=AdminApproval(
                approved=r.admin_approved,
                admin_response=r.admin_response,
                responded_at=r.admin_responded_at,
            ),
            teacher_approval=TeacherApproval(
                approved=r.teacher_approved,
                teacher_id=r.teacher_id,
                teacher_response=r.teacher_response,
                responded_at=r.teacher_responded_at,
            ),
            profile_picture=view.profile_picture,
        )


class ClearHistoryResponse(CamelModel):
    message: str
    deleted_count: int
