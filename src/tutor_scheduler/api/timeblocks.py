'''
API endpoints for stored timeblocks.
'''
from typing import Annotated, Any
from fastapi import APIRouter, Depends, status

from ..database import models as db_models
from ..models import timeblocks as timeblock_models
from ..services.security import verify_token_and_get_tutor
from ..services.timeblock_service import TimeblockService


class TimeblocksAPI:
    def __init__(self):
        self.router = APIRouter(
            prefix="/timeblocks",
            tags=["Timeblocks"]
        )
        self._register_routes()

    def _register_routes(self):
        """Registers all the API routes for this class."""
        self.router.add_api_route(
            "/recurring",
            self.create_recurring,
            methods=["POST"],
            status_code=status.HTTP_201_CREATED,
            response_model=timeblock_models.RecurringTimeblockResult)

    async def create_recurring(
        self,
        data: timeblock_models.RecurringTimeblockCreate,
        current_tutor: Annotated[db_models.Tutors, Depends(verify_token_and_get_tutor)],
        timeblock_service: Annotated[TimeblockService, Depends(TimeblockService)]
    ) -> Any:
        """
        Stores one timeblock per date the recurring pattern lands on.
        """
        return await timeblock_service.create_recurring_for_api(current_tutor, data)

# Instantiate the class and export its router
timeblocks_api = TimeblocksAPI()
router = timeblocks_api.router
