'''
API endpoints for the tutor's weekly schedule.
'''
from typing import Annotated, Any
from fastapi import APIRouter, Depends

from ..database import models as db_models
from ..models import schedule as schedule_models
from ..services.security import verify_token_and_get_tutor
from ..services.schedule_service import ScheduleService


class ScheduleAPI:
    """
    A class to encapsulate endpoints for the weekly schedule.
    """
    def __init__(self):
        self.router = APIRouter(
            prefix="/schedule",
            tags=["Schedule"]
        )
        self._register_routes()

    def _register_routes(self):
        """Registers all the API routes for this class."""
        self.router.add_api_route(
                "/",
                self.get_schedule,
                methods=["GET"],
                response_model=schedule_models.WeeklyTemplateRead)

        self.router.add_api_route(
                "/",
                self.save_schedule,
                methods=["PUT"],
                response_model=schedule_models.ScheduleSaveResult)

    async def get_schedule(
        self,
        current_tutor: Annotated[db_models.Tutors, Depends(verify_token_and_get_tutor)],
        schedule_service: Annotated[ScheduleService, Depends(ScheduleService)]
    ) -> Any:
        """
        Retrieves the current tutor's weekly template.
        """
        return await schedule_service.get_template_for_api(current_tutor)

    async def save_schedule(
        self,
        template: schedule_models.WeeklyTemplate,
        current_tutor: Annotated[db_models.Tutors, Depends(verify_token_and_get_tutor)],
        schedule_service: Annotated[ScheduleService, Depends(ScheduleService)]
    ) -> Any:
        """
        Replaces the weekly template and invites newly added regular students.
        """
        return await schedule_service.save_template_for_api(current_tutor, template)

# Instantiate the class and export its router
schedule_api = ScheduleAPI()
router = schedule_api.router
