from fastapi import APIRouter, Response

from sessiongate.core.modules.session.models import SessionView
from sessiongate.web.cookies import clear_session_cookie
from sessiongate.web.deps import AppDep, ConfigDep, CurrentSessionDep
from sessiongate.web.openapi import ErrorResponse

router = APIRouter(tags=["sessions"])


@router.get(
    "/sessions/current",
    summary="Get current session",
    description="Return the public view of the session behind the presented token.",
    operation_id="getCurrentSession",
    responses={
        200: {"description": "Session is valid"},
        401: {"model": ErrorResponse, "description": "Not authenticated"},
        503: {"model": ErrorResponse, "description": "Session store unavailable"},
    },
)
async def get_current_session(current: CurrentSessionDep) -> SessionView:
    return current.session


@router.delete(
    "/sessions/current",
    summary="End session",
    description="Revoke the session behind the presented token and clear the session cookie.",
    operation_id="logout",
    status_code=204,
    responses={
        204: {"description": "Successfully logged out"},
        401: {"model": ErrorResponse, "description": "Not authenticated"},
        503: {"model": ErrorResponse, "description": "Session store unavailable"},
    },
)
async def logout(app: AppDep, config: ConfigDep, current: CurrentSessionDep, response: Response) -> None:
    await app.revoke_session(current.session.id)
    clear_session_cookie(response, config)
