'''
API endpoints for team reports.
'''
from typing import Annotated, Any
from fastapi import APIRouter, Depends

from ..database import models as db_models
from ..models import reports as report_models
from ..services.security import verify_token_and_get_tutor
from ..services.report_service import ReportService


class ReportsAPI:
    def __init__(self):
        self.router = APIRouter(
            prefix="/reports",
            tags=["Reports"]
        )
        self._register_routes()

    def _register_routes(self):
        """Registers all the API routes for this class."""
        self.router.add_api_route(
            "/team-hours",
            self.get_team_hours,
            methods=["GET"],
            response_model=list[report_models.TutorHoursByType])

    async def get_team_hours(
        self,
        current_tutor: Annotated[db_models.Tutors, Depends(verify_token_and_get_tutor)],
        report_service: Annotated[ReportService, Depends(ReportService)]
    ) -> list[Any]:
        """
        Delivered hours per tutor and session type. Admins only.
        """
        return await report_service.get_team_hours_for_api(current_tutor)

# Instantiate the class and export its router
reports_api = ReportsAPI()
router = reports_api.router
