'''
API endpoints for recurring invitations and their cancelled dates.
'''
from datetime import date
from typing import Annotated, Any, List
from uuid import UUID
from fastapi import APIRouter, Depends, Query, Response, status

from ..database import models as db_models
from ..database.db_enums import InvitationStatusEnum
from ..models import invitations as invitation_models
from ..services.security import verify_token_and_get_tutor
from ..services.invitation_service import InvitationService


class InvitationsAPI:
    """
    A class to encapsulate endpoints for recurring invitations.
    """
    def __init__(self):
        self.router = APIRouter(
            prefix="/invitations",
            tags=["Invitations"]
        )
        self._register_routes()

    def _register_routes(self):
        """Registers all the API routes for this class."""
        self.router.add_api_route(
                "/",
                self.list_invitations,
                methods=["GET"],
                response_model=List[invitation_models.RecurringInvitationRead])

        self.router.add_api_route(
                "/accepted",
                self.list_accepted,
                methods=["GET"],
                response_model=List[invitation_models.RecurringInvitationRead])

        self.router.add_api_route(
                "/cancellations",
                self.list_cancellations,
                methods=["GET"],
                response_model=List[invitation_models.SessionCancellationRead])

        self.router.add_api_route(
                "/{invitation_id}/cancellations",
                self.cancel_occurrence,
                methods=["POST"],
                status_code=status.HTTP_201_CREATED,
                response_model=invitation_models.SessionCancellationRead)

        self.router.add_api_route(
                "/{invitation_id}/cancellations/{cancelled_date}",
                self.restore_occurrence,
                methods=["DELETE"],
                status_code=status.HTTP_204_NO_CONTENT)

    async def list_invitations(
        self,
        current_tutor: Annotated[db_models.Tutors, Depends(verify_token_and_get_tutor)],
        invitation_service: Annotated[InvitationService, Depends(InvitationService)],
        invitation_status: Annotated[InvitationStatusEnum | None, Query(alias="status")] = None
    ) -> List[Any]:
        """
        Lists every invitation the tutor has sent, optionally filtered by status.
        """
        return await invitation_service.get_invitations_for_api(current_tutor, invitation_status)

    async def list_accepted(
        self,
        current_tutor: Annotated[db_models.Tutors, Depends(verify_token_and_get_tutor)],
        invitation_service: Annotated[InvitationService, Depends(InvitationService)]
    ) -> List[Any]:
        return await invitation_service.get_accepted_invitations_for_api(current_tutor)

    async def list_cancellations(
        self,
        current_tutor: Annotated[db_models.Tutors, Depends(verify_token_and_get_tutor)],
        invitation_service: Annotated[InvitationService, Depends(InvitationService)]
    ) -> List[Any]:
        return await invitation_service.get_cancellations_for_api(current_tutor)

    async def cancel_occurrence(
        self,
        invitation_id: UUID,
        data: invitation_models.SessionCancellationCreate,
        current_tutor: Annotated[db_models.Tutors, Depends(verify_token_and_get_tutor)],
        invitation_service: Annotated[InvitationService, Depends(InvitationService)]
    ) -> Any:
        """
        Skips a single upcoming session of an accepted invitation.
        """
        return await invitation_service.cancel_occurrence_for_api(current_tutor, invitation_id, data.cancelled_date)

    async def restore_occurrence(
        self,
        invitation_id: UUID,
        cancelled_date: date,
        current_tutor: Annotated[db_models.Tutors, Depends(verify_token_and_get_tutor)],
        invitation_service: Annotated[InvitationService, Depends(InvitationService)]
    ):
        await invitation_service.restore_occurrence(current_tutor, invitation_id, cancelled_date)
        return Response(status_code=status.HTTP_204_NO_CONTENT)

# Instantiate the class and export its router
invitations_api = InvitationsAPI()
router = invitations_api.router
