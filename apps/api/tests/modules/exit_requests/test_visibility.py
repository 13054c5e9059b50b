"""
Unit tests for the department visibility filter.

These tests cover:
- Teacher containment (course/position match, Highschool year level)
- Teacher queue status filter and ordering
- Student scoping (own records, course match after trim/case-fold)
- Post-condition checks raising IntegrityViolationError
- Live profile picture enrichment
"""

import pytest

from sems.modules.exit_requests.errors import (
    IntegrityViolationError,
    UnrecognizedDepartmentError,
)
from sems.modules.exit_requests.models import RequestStatus
from sems.modules.exit_requests.routing import TeacherScope
from sems.modules.exit_requests.visibility import (
    check_student_postcondition,
    check_teacher_postcondition,
    enrich,
    for_admin,
    for_student,
    for_teacher,
)


class TestForTeacher:
    """Tests for the teacher view."""

    def test_only_matching_course_is_visible(self, make_teacher, make_exit_request):
        teacher = make_teacher(position="BSIT")
        requests = [
            make_exit_request(course="BSIT"),
            make_exit_request(course="BSHM"),
            make_exit_request(course="STEM"),
        ]

        result = for_teacher(teacher, requests)

        assert len(result) == 1
        assert all(r.course == teacher.position for r in result)

    def test_highschool_teacher_sees_only_highschool_students(
        self, make_teacher, make_exit_request, highschool_year_level
    ):
        teacher = make_teacher(department="Highschool", position="STEM")
        hs_request = make_exit_request(course="STEM", year_level=highschool_year_level)
        college_request = make_exit_request(course="STEM", year_level="1st Year")

        result = for_teacher(teacher, [hs_request, college_request])

        assert result == [hs_request]

    def test_only_queue_statuses_are_visible(self, make_teacher, make_exit_request):
        teacher = make_teacher(position="BSIT")
        pending = make_exit_request(status=RequestStatus.PENDING)
        admin_approved = make_exit_request(status=RequestStatus.ADMIN_APPROVED, admin_approved=True)
        hidden = [
            make_exit_request(status=RequestStatus.TEACHER_APPROVED, teacher_approved=True),
            make_exit_request(status=RequestStatus.FULLY_APPROVED),
            make_exit_request(status=RequestStatus.DECLINED),
        ]

        result = for_teacher(teacher, [pending, admin_approved, *hidden])

        assert {r.id for r in result} == {pending.id, admin_approved.id}

    def test_newest_first(self, make_teacher, make_exit_request):
        teacher = make_teacher(position="BSIT")
        older = make_exit_request(minutes=0)
        newer = make_exit_request(minutes=30)

        assert for_teacher(teacher, [older, newer]) == [newer, older]

    def test_unrecognized_department_is_rejected(self, make_teacher, make_exit_request):
        teacher = make_teacher(department="Elementary")

        with pytest.raises(UnrecognizedDepartmentError):
            for_teacher(teacher, [make_exit_request()])

    def test_postcondition_rejects_foreign_records(self, make_teacher, make_exit_request):
        scope = TeacherScope.from_teacher(make_teacher(position="BSIT"))

        with pytest.raises(IntegrityViolationError) as exc_info:
            check_teacher_postcondition(scope, [make_exit_request(course="STEM")])

        assert exc_info.value.status_code == 500

    def test_postcondition_rejects_finished_records(self, make_teacher, make_exit_request):
        scope = TeacherScope.from_teacher(make_teacher(position="BSIT"))

        with pytest.raises(IntegrityViolationError):
            check_teacher_postcondition(
                scope, [make_exit_request(status=RequestStatus.FULLY_APPROVED)]
            )


class TestForStudent:
    """Tests for the student view."""

    def test_only_own_records_are_visible(self, make_student, make_exit_request):
        student = make_student(student_id="2024-0001", course="BSIT")
        own = make_exit_request(student_id="2024-0001")
        classmate = make_exit_request(student_id="2024-0002")

        result = for_student(student, [own, classmate])

        assert result == [own]

    def test_course_match_ignores_case_and_whitespace(self, make_student, make_exit_request):
        student = make_student(course=" bsit ")
        request = make_exit_request(course="BSIT")

        assert for_student(student, [request]) == [request]

    def test_records_from_previous_course_are_hidden(self, make_student, make_exit_request):
        student = make_student(course="BSHM")

        assert for_student(student, [make_exit_request(course="BSIT")]) == []

    def test_all_statuses_visible_newest_first(self, make_student, make_exit_request):
        student = make_student()
        declined = make_exit_request(status=RequestStatus.DECLINED, minutes=0)
        approved = make_exit_request(status=RequestStatus.FULLY_APPROVED, minutes=10)
        pending = make_exit_request(status=RequestStatus.PENDING, minutes=20)

        assert for_student(student, [declined, approved, pending]) == [pending, approved, declined]

    def test_student_id_is_trimmed(self, make_student, make_exit_request):
        student = make_student(student_id="2024-0001")

        assert len(for_student(student, [make_exit_request(student_id=" 2024-0001 ")])) == 1

    def test_postcondition_rejects_other_students(self, make_exit_request):
        with pytest.raises(IntegrityViolationError):
            check_student_postcondition("2024-0001", [make_exit_request(student_id="2024-0002")])


class TestForAdminAndEnrich:
    """Tests for the admin view and profile picture enrichment."""

    def test_admin_sees_everything_newest_first(self, make_exit_request):
        a = make_exit_request(course="BSIT", minutes=0)
        b = make_exit_request(course="STEM", status=RequestStatus.DECLINED, minutes=5)

        assert for_admin([a, b]) == [b, a]

    def test_enrich_uses_live_picture_and_none_for_missing_students(self, make_exit_request):
        present = make_exit_request(student_id="2024-0001")
        deleted = make_exit_request(student_id="2024-0099")

        views = enrich([present, deleted], {"2024-0001": "https://cdn/pic.png"})

        assert views[0].profile_picture == "https://cdn/pic.png"
        assert views[1].profile_picture is None
        assert views[0].record is present
