'''
API endpoints for the tutor's calendar of upcoming sessions.
'''
from datetime import date
from typing import Annotated, Any
from fastapi import APIRouter, Depends, Query

from ..database import models as db_models
from ..models import occurrences as occurrence_models
from ..services.security import verify_token_and_get_tutor
from ..services.occurrence_service import OccurrenceService


class OccurrencesAPI:
    def __init__(self):
        self.router = APIRouter(
            prefix="/occurrences",
            tags=["Occurrences"]
        )
        self._register_routes()

    def _register_routes(self):
        """Registers all the API routes for this class."""
        self.router.add_api_route(
            "/",
            self.list_occurrences,
            methods=["GET"],
            response_model=list[occurrence_models.Occurrence])

    async def list_occurrences(
        self,
        current_tutor: Annotated[db_models.Tutors, Depends(verify_token_and_get_tutor)],
        occurrence_service: Annotated[OccurrenceService, Depends(OccurrenceService)],
        today: Annotated[date | None, Query(description="First day of the window. Defaults to the server's today.")] = None,
        resolve_students: Annotated[bool, Query(description="Look up student names in the identity provider")] = False
    ) -> list[Any]:
        """
        Stored sessions and derived weekly sessions from today to the horizon end.
        """
        return await occurrence_service.get_occurrences_for_api(
            current_tutor, today=today, resolve_students=resolve_students
        )

# Instantiate the class and export its router
occurrences_api = OccurrencesAPI()
router = occurrences_api.router
