'''
Transactional email through Resend.
'''
import asyncio
from html import escape

import resend

from ..common.config import settings
from ..common.exceptions import NotificationFailure
from ..common.logger import log

DAY_NAMES = ["Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday"]


def regular_invitation_template(
    tutor_name: str,
    day_of_week: int,
    start_time: str,
    duration: int,
    location: str,
    accept_url: str,
    decline_url: str
) -> str:
    """HTML body inviting a student to a weekly session."""
    return f"""
    <div style="font-family: Arial, sans-serif; max-width: 560px; margin: 0 auto;">
      <h2>You have been invited to a regular session</h2>
      <p>{escape(tutor_name)} would like to see you every week:</p>
      <ul>
        <li><strong>When:</strong> every {DAY_NAMES[day_of_week]} at {escape(start_time)}</li>
        <li><strong>Duration:</strong> {duration} minutes</li>
        <li><strong>Where:</strong> {escape(location)}</li>
      </ul>
      <p>
        <a href="{accept_url}" style="background:#8b5cf6;color:#fff;padding:10px 18px;border-radius:6px;text-decoration:none;">Accept</a>
        &nbsp;
        <a href="{decline_url}" style="color:#6b7280;">Decline</a>
      </p>
    </div>
    """


class EmailService:
    """
    Thin async wrapper around the Resend client.
    Every failure surfaces as NotificationFailure.
    """
    def __init__(self):
        resend.api_key = settings.RESEND_API_KEY

    async def send(self, recipient: str, subject: str, html: str) -> dict:
        params = {
            "from": settings.EMAIL_FROM_ADDRESS,
            "to": [recipient],
            "subject": subject,
            "html": html,
        }
        try:
            # The Resend SDK is blocking
            response = await asyncio.to_thread(resend.Emails.send, params)
        except Exception as e:
            log.error(f"Email send error to {recipient}: {e}")
            raise NotificationFailure(recipient, str(e)) from e

        log.info(f"Email sent successfully to {recipient}: {response}")
        return response

    async def send_regular_invitation(
        self,
        recipient: str,
        tutor_name: str,
        day_of_week: int,
        start_time: str,
        duration: int,
        location: str,
        token: str
    ) -> dict:
        base = settings.PUBLIC_BASE_URL.rstrip("/")
        html = regular_invitation_template(
            tutor_name=tutor_name,
            day_of_week=day_of_week,
            start_time=start_time,
            duration=duration,
            location=location,
            accept_url=f"{base}/invitations/{token}/accept",
            decline_url=f"{base}/invitations/{token}/decline",
        )
        return await self.send(
            recipient,
            subject=f"{tutor_name} invited you to a weekly session",
            html=html,
        )
