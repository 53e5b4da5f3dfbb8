import pytest
from datetime import date, datetime
from sqlalchemy.ext.asyncio import AsyncSession

from src.tutor_scheduler.common.exceptions import NotFoundError
from src.tutor_scheduler.database import models as db_models
from src.tutor_scheduler.database.db_enums import InvitationStatusEnum, OccurrenceStatusEnum
from src.tutor_scheduler.models.occurrences import DerivedOccurrence, PersistedOccurrence
from src.tutor_scheduler.services.occurrence_service import OccurrenceService
from tests.constants import TEST_STUDENT_ID, TEST_MONDAY, TEST_WEDNESDAY
from tests.database.factories import (
    RecurringInvitationFactory, SessionCancellationFactory, TimeblockFactory, persist
)


@pytest.mark.anyio
class TestOccurrenceService:

    async def test_merges_persisted_and_derived_in_start_order(
        self,
        db_session: AsyncSession,
        occurrence_service: OccurrenceService,
        test_tutor_orm: db_models.Tutors
    ):
        invitation = RecurringInvitationFactory(tutor_id=test_tutor_orm.id, day_of_week=3, start_time="14:00")
        tuesday_block = TimeblockFactory(tutor_id=test_tutor_orm.id, start_time=datetime(2025, 1, 7, 10, 0))
        await persist(db_session, invitation, tuesday_block)

        occurrences = await occurrence_service.get_occurrences_for_api(test_tutor_orm, today=TEST_MONDAY)

        assert isinstance(occurrences[0], PersistedOccurrence)
        assert occurrences[0].id == tuesday_block.id
        assert isinstance(occurrences[1], DerivedOccurrence)
        assert occurrences[1].start_time == datetime(2025, 1, 8, 14, 0)
        starts = [o.start_time for o in occurrences]
        assert starts == sorted(starts)
        derived = [o for o in occurrences if isinstance(o, DerivedOccurrence)]
        assert len(derived) == 13

    async def test_only_accepted_invitations_are_expanded(
        self,
        db_session: AsyncSession,
        occurrence_service: OccurrenceService,
        test_tutor_orm: db_models.Tutors
    ):
        await persist(
            db_session,
            RecurringInvitationFactory(tutor_id=test_tutor_orm.id, status=InvitationStatusEnum.PENDING.value),
            RecurringInvitationFactory(tutor_id=test_tutor_orm.id, day_of_week=4, status=InvitationStatusEnum.DECLINED.value),
        )

        assert await occurrence_service.get_occurrences_for_api(test_tutor_orm, today=TEST_MONDAY) == []

    async def test_cancelled_date_is_marked(
        self,
        db_session: AsyncSession,
        occurrence_service: OccurrenceService,
        test_tutor_orm: db_models.Tutors
    ):
        invitation = await persist(db_session, RecurringInvitationFactory(tutor_id=test_tutor_orm.id, day_of_week=3))
        await persist(db_session, SessionCancellationFactory(invitation_id=invitation.id, cancelled_date=TEST_WEDNESDAY))

        occurrences = await occurrence_service.get_occurrences_for_api(test_tutor_orm, today=TEST_MONDAY)

        assert occurrences[0].status == OccurrenceStatusEnum.CANCELLED
        assert all(o.status == OccurrenceStatusEnum.BOOKED for o in occurrences[1:])

    async def test_timeblocks_outside_window_are_left_out(
        self,
        db_session: AsyncSession,
        occurrence_service: OccurrenceService,
        test_tutor_orm: db_models.Tutors,
        test_other_tutor_orm: db_models.Tutors
    ):
        await persist(
            db_session,
            TimeblockFactory(tutor_id=test_tutor_orm.id, start_time=datetime(2025, 1, 5, 23, 0)),
            TimeblockFactory(tutor_id=test_tutor_orm.id, start_time=datetime(2025, 4, 6, 20, 0)),
            TimeblockFactory(tutor_id=test_tutor_orm.id, start_time=datetime(2025, 4, 7, 8, 0)),
            TimeblockFactory(tutor_id=test_other_tutor_orm.id, start_time=datetime(2025, 1, 9, 8, 0)),
        )

        occurrences = await occurrence_service.get_occurrences_for_api(test_tutor_orm, today=TEST_MONDAY)

        assert [o.start_time for o in occurrences] == [datetime(2025, 4, 6, 20, 0)]

    async def test_resolve_students_fills_names(
        self,
        db_session: AsyncSession,
        occurrence_service: OccurrenceService,
        mock_identity_service,
        test_tutor_orm: db_models.Tutors
    ):
        await persist(db_session, RecurringInvitationFactory(
            tutor_id=test_tutor_orm.id, student_id=TEST_STUDENT_ID, day_of_week=3
        ))

        occurrences = await occurrence_service.get_occurrences_for_api(
            test_tutor_orm, today=TEST_MONDAY, resolve_students=True
        )

        assert {o.student_name for o in occurrences} == {"Anna Student"}
        mock_identity_service.lookup.assert_awaited_once_with(TEST_STUDENT_ID)

    async def test_unknown_student_stays_unnamed(
        self,
        db_session: AsyncSession,
        occurrence_service: OccurrenceService,
        mock_identity_service,
        test_tutor_orm: db_models.Tutors
    ):
        mock_identity_service.lookup.side_effect = NotFoundError("User not found")
        await persist(db_session, RecurringInvitationFactory(tutor_id=test_tutor_orm.id, day_of_week=3))

        occurrences = await occurrence_service.get_occurrences_for_api(
            test_tutor_orm, today=TEST_MONDAY, resolve_students=True
        )

        assert occurrences
        assert all(o.student_name is None for o in occurrences)

    async def test_names_are_not_resolved_by_default(
        self,
        db_session: AsyncSession,
        occurrence_service: OccurrenceService,
        mock_identity_service,
        test_tutor_orm: db_models.Tutors
    ):
        await persist(db_session, RecurringInvitationFactory(tutor_id=test_tutor_orm.id, day_of_week=3))

        await occurrence_service.get_occurrences_for_api(test_tutor_orm, today=TEST_MONDAY)

        mock_identity_service.lookup.assert_not_awaited()
