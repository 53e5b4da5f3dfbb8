'''
Recurring invitation service.
'''
import asyncio
import secrets
from datetime import date
from typing import Annotated, Optional
from uuid import UUID

from fastapi import Depends, HTTPException, status
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from ..common.config import settings
from ..common.exceptions import NotificationFailure, PersistenceFailure
from ..common.logger import log
from ..core.occurrence_expander import horizon_end
from ..core.recurring_patterns import sunday_based_weekday
from ..database.engine import get_db_session
from ..database import models as db_models
from ..database.db_enums import InvitationStatusEnum
from ..models import invitations as invitation_models
from ..models.schedule import WeeklyTemplate, InvitationDiffSummary
from .email_service import EmailService


class InvitationService:
    """
    Service for the invitations a tutor sends to regular students, and for
    the per-date cancellations of the sessions those invitations produce.
    """
    def __init__(
        self,
        db: Annotated[AsyncSession, Depends(get_db_session)],
        email_service: Annotated[EmailService, Depends(EmailService)]
    ):
        self.db = db
        self.email_service = email_service

    # --- Internal Fetchers ---

    async def _find_by_natural_key(
        self,
        tutor_id: UUID,
        student_email: str,
        day_of_week: int,
        start_time: str
    ) -> db_models.RecurringInvitations | None:
        stmt = select(db_models.RecurringInvitations).filter(
            db_models.RecurringInvitations.tutor_id == tutor_id,
            db_models.RecurringInvitations.student_email == student_email,
            db_models.RecurringInvitations.day_of_week == day_of_week,
            db_models.RecurringInvitations.start_time == start_time
        ).limit(1)
        result = await self.db.execute(stmt)
        return result.scalars().first()

    async def _get_owned_invitation(self, tutor: db_models.Tutors, invitation_id: UUID) -> db_models.RecurringInvitations:
        """Fetches an invitation, 404 if it is missing or belongs to another tutor."""
        invitation = await self.db.get(db_models.RecurringInvitations, invitation_id)
        if not invitation or invitation.tutor_id != tutor.id:
            log.warning(f"Tutor {tutor.id} tried to access missing or foreign invitation {invitation_id}.")
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Invitation not found.")
        return invitation

    # --- Persistence Operations ---

    async def list_accepted_invitations(self, tutor_id: UUID) -> list[db_models.RecurringInvitations]:
        stmt = select(db_models.RecurringInvitations).filter(
            db_models.RecurringInvitations.tutor_id == tutor_id,
            db_models.RecurringInvitations.status == InvitationStatusEnum.ACCEPTED.value
        ).order_by(db_models.RecurringInvitations.day_of_week, db_models.RecurringInvitations.start_time)
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def list_cancellations(self, tutor_id: UUID) -> list[db_models.SessionCancellations]:
        stmt = select(db_models.SessionCancellations).join(
            db_models.RecurringInvitations,
            db_models.SessionCancellations.invitation_id == db_models.RecurringInvitations.id
        ).filter(
            db_models.RecurringInvitations.tutor_id == tutor_id
        ).order_by(db_models.SessionCancellations.cancelled_date)
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    # --- Invitation Diffing ---

    async def process_regulars(self, tutor: db_models.Tutors, template: WeeklyTemplate) -> InvitationDiffSummary:
        """
        Creates a pending invitation for every regulars slot of `template`
        whose (tutor, email, day, start time) has never been invited before,
        then emails each new invitee. New invitations are committed before
        the first email is sent, together with anything else pending in
        the session (the saved template).

        Every day of the template is scanned, so saving the same template
        twice creates nothing the second time. There is no transaction
        around the check and the insert: two concurrent saves may both
        create the same invitation.
        """
        summary = InvitationDiffSummary()
        created: list[db_models.RecurringInvitations] = []

        for day, slot in template.regulars_slots():
            existing = await self._find_by_natural_key(tutor.id, slot.email, day, slot.start_time)
            if existing:
                log.info(f"Invitation for {slot.email} on day {day} at {slot.start_time} already exists ({existing.status}). Skipping.")
                summary.skipped += 1
                continue

            invitation = db_models.RecurringInvitations(
                tutor_id=tutor.id,
                student_email=slot.email,
                student_id=slot.student_id,
                day_of_week=day,
                start_time=slot.start_time,
                duration=slot.duration,
                location=slot.location,
                description=slot.description,
                color=slot.color,
                status=InvitationStatusEnum.PENDING.value,
                token=secrets.token_urlsafe(32),
            )
            try:
                self.db.add(invitation)
                await self.db.flush()
            except SQLAlchemyError as e:
                log.error(f"Failed to store invitation for {slot.email}: {e}", exc_info=True)
                raise PersistenceFailure(f"Could not store invitation for {slot.email}") from e

            created.append(invitation)
            summary.created += 1

        if created:
            # Tokens go out in emails, so they must be stored first.
            try:
                await self.db.commit()
            except SQLAlchemyError as e:
                log.error(f"Failed to commit invitations for tutor {tutor.id}: {e}", exc_info=True)
                raise PersistenceFailure("Could not store invitations") from e

        failures = await self._notify_all(tutor, created)
        summary.notified = len(created) - len(failures)
        summary.notification_failures = failures
        log.info(f"Invitation pass for tutor {tutor.id}: {summary.model_dump()}")
        return summary

    async def _notify_all(self, tutor: db_models.Tutors, invitations: list[db_models.RecurringInvitations]) -> list[str]:
        """
        Emails every invitee with bounded concurrency.
        Returns the addresses that could not be notified.
        """
        semaphore = asyncio.Semaphore(max(1, settings.EMAIL_MAX_CONCURRENCY))

        async def notify(invitation: db_models.RecurringInvitations) -> Optional[str]:
            async with semaphore:
                try:
                    await self.email_service.send_regular_invitation(
                        recipient=invitation.student_email,
                        tutor_name=tutor.name,
                        day_of_week=invitation.day_of_week,
                        start_time=invitation.start_time,
                        duration=invitation.duration,
                        location=invitation.location,
                        token=invitation.token,
                    )
                    return None
                except NotificationFailure as e:
                    log.warning(f"Invitation {invitation.id} stored but email failed: {e}")
                    return invitation.student_email
                except Exception as e:
                    log.error(f"Unexpected error emailing {invitation.student_email}: {e}", exc_info=True)
                    return invitation.student_email

        results = await asyncio.gather(*(notify(inv) for inv in invitations))
        return [email for email in results if email is not None]

    # --- Public Read Methods (API-Facing) ---

    async def get_invitations_for_api(
        self,
        tutor: db_models.Tutors,
        invitation_status: Optional[InvitationStatusEnum] = None
    ) -> list[invitation_models.RecurringInvitationRead]:
        log.info(f"Tutor {tutor.id} listing invitations (status={invitation_status}).")
        stmt = select(db_models.RecurringInvitations).filter(
            db_models.RecurringInvitations.tutor_id == tutor.id
        ).order_by(db_models.RecurringInvitations.day_of_week, db_models.RecurringInvitations.start_time)
        if invitation_status is not None:
            stmt = stmt.filter(db_models.RecurringInvitations.status == invitation_status.value)

        result = await self.db.execute(stmt)
        return [invitation_models.RecurringInvitationRead.model_validate(inv) for inv in result.scalars().all()]

    async def get_accepted_invitations_for_api(self, tutor: db_models.Tutors) -> list[invitation_models.RecurringInvitationRead]:
        invitations = await self.list_accepted_invitations(tutor.id)
        return [invitation_models.RecurringInvitationRead.model_validate(inv) for inv in invitations]

    async def get_cancellations_for_api(self, tutor: db_models.Tutors) -> list[invitation_models.SessionCancellationRead]:
        cancellations = await self.list_cancellations(tutor.id)
        return [invitation_models.SessionCancellationRead.model_validate(c) for c in cancellations]

    # --- Public Write Methods (API-Facing) ---

    async def cancel_occurrence_for_api(
        self,
        tutor: db_models.Tutors,
        invitation_id: UUID,
        cancelled_date: date,
        today: Optional[date] = None
    ) -> invitation_models.SessionCancellationRead:
        """
        Skips one dated session of an accepted invitation without touching
        the invitation itself. Cancelling an already cancelled date returns
        the existing cancellation.
        """
        today = today or date.today()
        log.info(f"Tutor {tutor.id} cancelling {cancelled_date} of invitation {invitation_id}.")
        invitation = await self._get_owned_invitation(tutor, invitation_id)

        if invitation.status != InvitationStatusEnum.ACCEPTED.value:
            raise HTTPException(
                status_code=status.HTTP_422_UNPROCESSABLE_CONTENT,
                detail="Only sessions of accepted invitations can be cancelled."
            )
        if sunday_based_weekday(cancelled_date) != invitation.day_of_week:
            raise HTTPException(
                status_code=status.HTTP_422_UNPROCESSABLE_CONTENT,
                detail="The invitation has no session on that date."
            )
        if cancelled_date < today or cancelled_date > horizon_end(today, settings.OCCURRENCE_HORIZON_MONTHS):
            raise HTTPException(
                status_code=status.HTTP_422_UNPROCESSABLE_CONTENT,
                detail="Only upcoming sessions can be cancelled."
            )

        stmt = select(db_models.SessionCancellations).filter(
            db_models.SessionCancellations.invitation_id == invitation.id,
            db_models.SessionCancellations.cancelled_date == cancelled_date
        )
        existing = (await self.db.execute(stmt)).scalars().first()
        if existing:
            return invitation_models.SessionCancellationRead.model_validate(existing)

        cancellation = db_models.SessionCancellations(
            invitation_id=invitation.id,
            cancelled_date=cancelled_date
        )
        try:
            self.db.add(cancellation)
            await self.db.flush()
        except SQLAlchemyError as e:
            log.error(f"Failed to store cancellation for invitation {invitation.id}: {e}", exc_info=True)
            raise PersistenceFailure("Could not store the cancellation") from e
        return invitation_models.SessionCancellationRead.model_validate(cancellation)

    async def restore_occurrence(self, tutor: db_models.Tutors, invitation_id: UUID, cancelled_date: date) -> bool:
        """Removes a cancellation so the dated session is booked again."""
        log.info(f"Tutor {tutor.id} restoring {cancelled_date} of invitation {invitation_id}.")
        invitation = await self._get_owned_invitation(tutor, invitation_id)

        stmt = select(db_models.SessionCancellations).filter(
            db_models.SessionCancellations.invitation_id == invitation.id,
            db_models.SessionCancellations.cancelled_date == cancelled_date
        )
        cancellation = (await self.db.execute(stmt)).scalars().first()
        if not cancellation:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Cancellation not found.")

        await self.db.delete(cancellation)
        await self.db.flush()
        return True
