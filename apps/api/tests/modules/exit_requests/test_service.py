"""
Unit tests for the exit requests service layer.

These tests cover:
- Submission (course stamping, notification fan-out, unknown student)
- Decisions (state changes, confirmations, security alert, finalized requests)
- Admin, teacher and student views
- Clearing history
- The full submit / approve / approve workflow
"""

from unittest.mock import AsyncMock, patch
from uuid import uuid4

import pytest

from sems.modules.exit_requests.errors import (
    ExitRequestNotFoundError,
    RequestFinalizedError,
    StudentNotFoundError,
    TeacherNotFoundError,
    UnrecognizedDepartmentError,
    ValidationError,
)
from sems.modules.exit_requests.models import RequestStatus
from sems.modules.exit_requests.schemas import DecisionRequest, ExitRequestCreate
from sems.modules.exit_requests.service import (
    clear_history,
    list_for_admin,
    list_for_student,
    list_for_teacher,
    record_decision,
    submit_exit_request,
)
from sems.modules.notifications.models import NotificationKind


def _submission(student_id: str = "2024-0001") -> ExitRequestCreate:
    return ExitRequestCreate(
        student_id=student_id,
        reason_for_exit="Dental appointment",
        date="2026-03-02",
        time="14:00",
        emergency_contact="09171234567",
        guard_name="Guard Ramos",
    )


def _teacher_decision(status: str, teacher_id: str = "T-BSIT-01", response: str = "") -> DecisionRequest:
    return DecisionRequest(status=status, teacher_id=teacher_id, teacher_response=response)


def _admin_decision(status: str, response: str = "") -> DecisionRequest:
    return DecisionRequest(status=status, admin_response=response)


class TestSubmitExitRequest:
    """Tests for submit_exit_request."""

    @pytest.mark.asyncio
    async def test_stamps_snapshot_from_student_account(self, mock_db, wired):
        result = await submit_exit_request(mock_db, _submission())
        record = result.view.record

        assert record.course == "BSIT"
        assert record.year_level == "3rd Year"
        assert record.first_name == "Juan"
        assert record.status == RequestStatus.PENDING
        assert record.admin_approved is False
        assert record.teacher_approved is False
        assert record.teacher_id == ""
        assert record.admin_responded_at is None
        assert record.submitted_at is not None
        assert result.view.profile_picture == "https://cdn.school.edu/juan.png"

    @pytest.mark.asyncio
    async def test_stamped_student_id_is_trimmed(self, mock_db, wired, make_student):
        _, campus = wired
        campus.students["2024-0005"] = make_student(student_id=" 2024-0005 ")

        result = await submit_exit_request(mock_db, _submission("2024-0005"))

        assert result.view.record.student_id == "2024-0005"
        assert [v.record.id for v in await list_for_student(mock_db, "2024-0005")] == [
            result.view.record.id
        ]

    @pytest.mark.asyncio
    async def test_notifies_matching_teachers_and_all_admins(self, mock_db, wired):
        store, _ = wired

        result = await submit_exit_request(mock_db, _submission())

        teacher_mails = store.intents_of_kind(NotificationKind.TEACHER_NEW_REQUEST)
        admin_mails = store.intents_of_kind(NotificationKind.ADMIN_NEW_REQUEST)
        assert [i.recipient_email for i in teacher_mails] == ["maria@school.edu"]
        assert [i.recipient_email for i in admin_mails] == ["admin@school.edu"]
        assert len(result.notification_ids) == 2
        assert teacher_mails[0].template_args["course"] == "BSIT"

    @pytest.mark.asyncio
    async def test_unknown_student_is_bad_request(self, mock_db, wired):
        store, _ = wired

        with pytest.raises(StudentNotFoundError) as exc_info:
            await submit_exit_request(mock_db, _submission("2099-9999"))

        assert exc_info.value.status_code == 400
        assert store.records == {}

    @pytest.mark.asyncio
    async def test_recipient_lookup_failure_still_creates_request(self, mock_db, wired):
        store, _ = wired

        with patch(
            "sems.modules.notifications.dispatcher.resolve_all_admins",
            AsyncMock(side_effect=RuntimeError("connection reset")),
        ):
            result = await submit_exit_request(mock_db, _submission())

        assert result.view.record.id in store.records
        assert result.notification_ids == []

    @pytest.mark.asyncio
    async def test_unrouted_course_only_notifies_admins(self, mock_db, wired, make_student):
        store, campus = wired
        campus.students["2024-0100"] = make_student(student_id="2024-0100", course="BSCS")

        await submit_exit_request(mock_db, _submission("2024-0100"))

        assert store.intents_of_kind(NotificationKind.TEACHER_NEW_REQUEST) == []
        assert len(store.intents_of_kind(NotificationKind.ADMIN_NEW_REQUEST)) == 1


class TestRecordDecision:
    """Tests for record_decision."""

    @pytest.mark.asyncio
    async def test_unknown_request(self, mock_db, wired):
        with pytest.raises(ExitRequestNotFoundError):
            await record_decision(mock_db, str(uuid4()), _admin_decision("approved"))

    @pytest.mark.asyncio
    async def test_malformed_request_id_is_not_found(self, mock_db, wired):
        with pytest.raises(ExitRequestNotFoundError):
            await record_decision(mock_db, "not-a-uuid", _admin_decision("approved"))

    @pytest.mark.asyncio
    async def test_teacher_decision_queues_confirmation(self, mock_db, wired):
        store, _ = wired
        submitted = await submit_exit_request(mock_db, _submission())

        result = await record_decision(
            mock_db,
            submitted.view.record.id,
            _teacher_decision("approved", response="Take care"),
        )

        assert result.view.record.status == RequestStatus.TEACHER_APPROVED
        confirmations = store.intents_of_kind(NotificationKind.TEACHER_DECISION_CONFIRMATION)
        assert len(confirmations) == 1
        assert confirmations[0].template_args["decision"] == "approved"
        assert confirmations[0].template_args["response"] == "Take care"

    @pytest.mark.asyncio
    async def test_admin_decision_sends_no_confirmation(self, mock_db, wired):
        store, _ = wired
        submitted = await submit_exit_request(mock_db, _submission())

        result = await record_decision(mock_db, submitted.view.record.id, _admin_decision("approved"))

        assert result.view.record.status == RequestStatus.ADMIN_APPROVED
        assert result.notification_ids == []

    @pytest.mark.asyncio
    async def test_unknown_teacher_decision_is_recorded(self, mock_db, wired):
        store, _ = wired
        submitted = await submit_exit_request(mock_db, _submission())

        result = await record_decision(
            mock_db, submitted.view.record.id, _teacher_decision("approved", teacher_id="T-GHOST")
        )

        assert result.view.record.status == RequestStatus.TEACHER_APPROVED
        assert result.view.record.teacher_id == "T-GHOST"
        assert store.intents_of_kind(NotificationKind.TEACHER_DECISION_CONFIRMATION) == []

    @pytest.mark.asyncio
    async def test_teacher_approved_then_admin_declines(self, mock_db, wired):
        store, _ = wired
        request_id = (await submit_exit_request(mock_db, _submission())).view.record.id

        await record_decision(mock_db, request_id, _teacher_decision("approved"))
        result = await record_decision(mock_db, request_id, _admin_decision("declined", "No"))

        assert result.view.record.status == RequestStatus.DECLINED
        assert store.intents_of_kind(NotificationKind.SECURITY_ALERT) == []

    @pytest.mark.asyncio
    async def test_declined_request_is_final(self, mock_db, wired):
        request_id = (await submit_exit_request(mock_db, _submission())).view.record.id
        await record_decision(mock_db, request_id, _admin_decision("declined"))

        with pytest.raises(RequestFinalizedError):
            await record_decision(mock_db, request_id, _teacher_decision("approved"))

    @pytest.mark.asyncio
    async def test_course_unchanged_after_decisions(self, mock_db, wired):
        request_id = (await submit_exit_request(mock_db, _submission())).view.record.id

        await record_decision(mock_db, request_id, _admin_decision("approved"))
        result = await record_decision(mock_db, request_id, _teacher_decision("approved"))

        assert result.view.record.course == "BSIT"


class TestViews:
    """Tests for the admin, teacher and student views."""

    @pytest.mark.asyncio
    async def test_teacher_not_found(self, mock_db, wired):
        with pytest.raises(TeacherNotFoundError):
            await list_for_teacher(mock_db, "T-NOBODY")

    @pytest.mark.asyncio
    async def test_teacher_with_unknown_department(self, mock_db, wired, make_teacher):
        _, campus = wired
        campus.teachers["T-ELEM-01"] = make_teacher(teacher_id="T-ELEM-01", department="Elementary")

        with pytest.raises(UnrecognizedDepartmentError):
            await list_for_teacher(mock_db, "T-ELEM-01")

    @pytest.mark.asyncio
    async def test_blank_student_id(self, mock_db, wired):
        with pytest.raises(ValidationError):
            await list_for_student(mock_db, "   ")

    @pytest.mark.asyncio
    async def test_unknown_student(self, mock_db, wired):
        with pytest.raises(StudentNotFoundError) as exc_info:
            await list_for_student(mock_db, "2099-9999")

        assert exc_info.value.status_code == 404

    @pytest.mark.asyncio
    async def test_student_never_sees_another_students_record(self, mock_db, wired, make_student):
        _, campus = wired
        campus.students["2024-0003"] = make_student(student_id="2024-0003", course="BSIT")
        await submit_exit_request(mock_db, _submission("2024-0001"))
        await submit_exit_request(mock_db, _submission("2024-0003"))

        views = await list_for_student(mock_db, "2024-0003")

        assert [v.record.student_id for v in views] == ["2024-0003"]

    @pytest.mark.asyncio
    async def test_admin_view_enriches_missing_student_with_none(self, mock_db, wired):
        _, campus = wired
        await submit_exit_request(mock_db, _submission("2024-0001"))
        del campus.students["2024-0001"]

        views = await list_for_admin(mock_db)

        assert len(views) == 1
        assert views[0].profile_picture is None


class TestClearHistory:
    """Tests for clear_history."""

    @pytest.mark.asyncio
    async def test_returns_count_and_empties_store(self, mock_db, wired):
        store, _ = wired
        for _ in range(3):
            await submit_exit_request(mock_db, _submission("2024-0001"))
        for _ in range(2):
            await submit_exit_request(mock_db, _submission("2024-0002"))

        assert await clear_history(mock_db) == 5
        assert store.records == {}
        assert await list_for_admin(mock_db) == []

    @pytest.mark.asyncio
    async def test_purges_resolved_requests_too(self, mock_db, wired):
        store, _ = wired
        pending = [
            (await submit_exit_request(mock_db, _submission("2024-0001"))).view.record.id
            for _ in range(2)
        ]
        approved_id = (await submit_exit_request(mock_db, _submission("2024-0001"))).view.record.id
        declined_id = (await submit_exit_request(mock_db, _submission("2024-0002"))).view.record.id

        await record_decision(mock_db, approved_id, _teacher_decision("approved"))
        await record_decision(mock_db, approved_id, _admin_decision("approved"))
        await record_decision(mock_db, declined_id, _admin_decision("declined"))

        statuses = {r.id: r.status for r in store.records.values()}
        assert statuses[approved_id] == RequestStatus.FULLY_APPROVED
        assert statuses[declined_id] == RequestStatus.DECLINED
        assert all(statuses[i] == RequestStatus.PENDING for i in pending)

        assert await clear_history(mock_db) == 4
        assert await list_for_admin(mock_db) == []
        assert await list_for_student(mock_db, "2024-0001") == []


class TestFullWorkflow:
    """BSIT student submits; the BSIT teacher and the admin both approve."""

    @pytest.mark.asyncio
    async def test_dual_approval_end_to_end(self, mock_db, wired):
        store, _ = wired

        submitted = await submit_exit_request(mock_db, _submission("2024-0001"))
        request_id = submitted.view.record.id

        admin_ids = [v.record.id for v in await list_for_admin(mock_db)]
        bsit_ids = [v.record.id for v in await list_for_teacher(mock_db, "T-BSIT-01")]
        stem_ids = [v.record.id for v in await list_for_teacher(mock_db, "T-STEM-01")]
        student_ids = [v.record.id for v in await list_for_student(mock_db, "2024-0001")]
        assert request_id in admin_ids
        assert request_id in bsit_ids
        assert request_id not in stem_ids
        assert request_id in student_ids

        after_teacher = await record_decision(mock_db, request_id, _teacher_decision("approved"))
        assert after_teacher.view.record.status == RequestStatus.TEACHER_APPROVED

        after_admin = await record_decision(mock_db, request_id, _admin_decision("approved"))
        assert after_admin.view.record.status == RequestStatus.FULLY_APPROVED

        alerts = store.intents_of_kind(NotificationKind.SECURITY_ALERT)
        assert len(alerts) == 1
        assert alerts[0].template_args["student_id"] == "2024-0001"
        assert alerts[0].template_args["course"] == "BSIT"

        with pytest.raises(RequestFinalizedError):
            await record_decision(mock_db, request_id, _admin_decision("approved"))
        assert len(store.intents_of_kind(NotificationKind.SECURITY_ALERT)) == 1

        # No longer waiting on the teacher
        assert await list_for_teacher(mock_db, "T-BSIT-01") == []
