'''
API endpoints for tutor accounts.
'''
from typing import Annotated, Any
from fastapi import APIRouter, Depends

from ..database import models as db_models
from ..models import user as user_models
from ..services.security import get_current_identity, verify_token_and_get_tutor
from ..services.tutor_service import TutorService


class TutorsAPI:
    def __init__(self):
        self.router = APIRouter(
            prefix="/tutors",
            tags=["Tutors"]
        )
        self._register_routes()

    def _register_routes(self):
        """Registers all the API routes for this class."""
        self.router.add_api_route(
            "/activate",
            self.activate,
            methods=["POST"],
            response_model=user_models.TutorRead)

        self.router.add_api_route(
            "/me",
            self.get_me,
            methods=["GET"],
            response_model=user_models.TutorRead)

    async def activate(
        self,
        external_id: Annotated[str, Depends(get_current_identity)],
        tutor_service: Annotated[TutorService, Depends(TutorService)]
    ) -> Any:
        """
        Turns the signed-in identity into a tutor account. Safe to repeat.
        """
        return await tutor_service.activate_tutor_for_api(external_id)

    async def get_me(
        self,
        current_tutor: Annotated[db_models.Tutors, Depends(verify_token_and_get_tutor)]
    ) -> Any:
        return user_models.TutorRead.model_validate(current_tutor)

# Instantiate the class and export its router
tutors_api = TutorsAPI()
router = tutors_api.router
