"""
Email Service using Resend

Renders and sends the exit-request workflow emails:
- New request notifications for department teachers and admins
- Decision confirmations for teachers
- Security alerts for fully approved requests
"""

import asyncio
import logging
from html import escape

import resend

from sems.core.config import settings

logger = logging.getLogger(__name__)

resend.api_key = settings.resend_api_key

_STYLES = """
            body { font-family: system-ui, -apple-system, sans-serif; line-height: 1.6; color: #1f2937; }
            .container { max-width: 600px; margin: 0 auto; padding: 40px 20px; }
            .header { color: #1a365d; margin-bottom: 24px; }
            .details { width: 100%; border-collapse: collapse; margin: 16px 0; }
            .details td { padding: 8px 0; border-bottom: 1px solid #e5e7eb; }
            .details td.label { font-weight: bold; width: 40%; }
            .notice { background-color: #fef3c7; border: 1px solid #f59e0b; padding: 16px; border-radius: 8px; margin: 16px 0; }
            .approved { background-color: #d1fae5; border: 1px solid #22c55e; padding: 16px; border-radius: 8px; margin: 16px 0; }
            .declined { background-color: #fef2f2; border: 1px solid #fecaca; padding: 16px; border-radius: 8px; margin: 16px 0; }
            .button { display: inline-block; background-color: #1a365d; color: white; padding: 14px 28px; text-decoration: none; border-radius: 8px; margin: 24px 0; }
            .footer { margin-top: 40px; padding-top: 20px; border-top: 1px solid #e5e7eb; color: #6b7280; font-size: 14px; }
"""


async def send_email(
    to_email: str,
    subject: str,
    html_content: str,
) -> bool:
    """
    Send an email using Resend.

    Args:
        to_email: Recipient email address
        subject: Email subject line
        html_content: HTML content of the email

    Returns:
        True if email was sent successfully
    """
    if not resend.api_key:
        logger.warning("RESEND_API_KEY not set - logging email instead of sending")
        logger.info(f"EMAIL TO: {to_email} | SUBJECT: {subject}")
        return True

    try:
        params: resend.Emails.SendParams = {
            "from": settings.email_from,
            "to": [to_email],
            "subject": subject,
            "html": html_content,
        }

        # Resend's client is synchronous; keep it off the event loop
        email = await asyncio.to_thread(resend.Emails.send, params)
        logger.info(f"Email sent successfully to {to_email}, id: {email['id']}")
        return True
    except Exception as e:
        logger.error(f"Failed to send email to {to_email}: {e}")
        return False


def _details_table(rows: list[tuple[str, str]]) -> str:
    """Render label/value rows. Values must already be escaped."""
    cells = "\n".join(
        f'<tr><td class="label">{label}</td><td>{value}</td></tr>' for label, value in rows
    )
    return f'<table class="details">{cells}</table>'


def _render(title: str, body: str) -> str:
    return f"""
    <!DOCTYPE html>
    <html>
    <head>
        <style>{_STYLES}</style>
    </head>
    <body>
        <div class="container">
            <h1 class="header">{title}</h1>
            {body}
            <div class="footer">
                <p>This is an automated message from the Smart Exit Monitoring System.</p>
            </div>
        </div>
    </body>
    </html>
    """


def _request_rows(
    student_name: str,
    student_id: str,
    course: str,
    year_level: str,
    reason: str,
    date: str,
    time: str,
) -> list[tuple[str, str]]:
    return [
        ("Student", escape(student_name)),
        ("Student ID", escape(student_id)),
        ("Course / Year", escape(f"{course} {year_level}".strip())),
        ("Reason", escape(reason)),
        ("Date", escape(date)),
        ("Time", escape(time)),
    ]


async def send_teacher_new_request(
    to_email: str,
    teacher_name: str,
    student_name: str,
    student_id: str,
    course: str,
    year_level: str,
    reason: str,
    date: str,
    time: str,
) -> bool:
    """Notify a department teacher that a request awaits their decision."""
    dashboard_url = f"{settings.frontend_url}/teacher/exit-requests"
    body = f"""
            <p>Hello {escape(teacher_name)},</p>
            <div class="notice">
                A student from your department has submitted an exit request that needs your approval.
            </div>
            {_details_table(_request_rows(student_name, student_id, course, year_level, reason, date, time))}
            <a href="{dashboard_url}" class="button">Review Request</a>
    """
    return await send_email(
        to_email=to_email,
        subject=f"New exit request from {escape(student_name)} ({escape(student_id)})",
        html_content=_render("New Exit Request", body),
    )


async def send_admin_new_request(
    to_email: str,
    admin_name: str,
    student_name: str,
    student_id: str,
    course: str,
    year_level: str,
    reason: str,
    date: str,
    time: str,
) -> bool:
    """Notify an admin that a new request was submitted."""
    dashboard_url = f"{settings.frontend_url}/admin/exit-requests"
    body = f"""
            <p>Hello {escape(admin_name)},</p>
            <div class="notice">
                A new exit request has been submitted and requires admin approval.
            </div>
            {_details_table(_request_rows(student_name, student_id, course, year_level, reason, date, time))}
            <a href="{dashboard_url}" class="button">Open Approval Queue</a>
    """
    return await send_email(
        to_email=to_email,
        subject=f"[Admin] New exit request from {escape(student_name)} ({escape(student_id)})",
        html_content=_render("New Exit Request", body),
    )


async def send_teacher_decision_confirmation(
    to_email: str,
    teacher_name: str,
    student_name: str,
    student_id: str,
    decision: str,
    response: str,
) -> bool:
    """Confirm to a teacher the decision they recorded."""
    box_class = "approved" if decision == "approved" else "declined"
    response_html = (
        f"<p><strong>Your response:</strong> {escape(response)}</p>" if response else ""
    )
    body = f"""
            <p>Hello {escape(teacher_name)},</p>
            <div class="{box_class}">
                You have <strong>{escape(decision)}</strong> the exit request of
                <strong>{escape(student_name)}</strong> ({escape(student_id)}).
            </div>
            {response_html}
    """
    return await send_email(
        to_email=to_email,
        subject=f"Exit request {escape(decision)}: {escape(student_name)} ({escape(student_id)})",
        html_content=_render("Decision Recorded", body),
    )


async def send_security_alert(
    to_email: str,
    student_name: str,
    student_id: str,
    course: str,
    date: str,
    time: str,
    reason: str,
) -> bool:
    """Alert campus security that a student is fully authorized to exit."""
    rows = [
        ("Student", escape(student_name)),
        ("Student ID", escape(student_id)),
        ("Course", escape(course)),
        ("Date", escape(date)),
        ("Time", escape(time)),
        ("Reason", escape(reason)),
    ]
    body = f"""
            <div class="approved">
                This exit request has been approved by both the department teacher and the admin.
                The student is authorized to leave campus at the time below.
            </div>
            {_details_table(rows)}
    """
    return await send_email(
        to_email=to_email,
        subject=f"SECURITY ALERT: Approved exit request - {escape(student_name)} ({escape(student_id)})",
        html_content=_render("Approved Exit Request", body),
    )
