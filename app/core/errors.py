# app/core/errors.py

from fastapi import FastAPI, Request
from fastapi import status as http_status
from fastapi.responses import JSONResponse

from app.core.logger import logger

SESSION_ERROR_MESSAGE = (
    "Your doctor account is missing an internal mapping ID. "
    "Please sign out and sign back in to refresh your session."
)


class DashboardError(Exception):
    """Base class for errors raised by the dashboard core."""


class SessionError(DashboardError):
    """The signed-in doctor has no reference id for the remote API."""

    def __init__(self, message: str = SESSION_ERROR_MESSAGE):
        super().__init__(message)
        self.message = message


class GraphQLRequestError(DashboardError):
    """A remote query or mutation could not be completed."""

    def __init__(self, message: str, status_code: int = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class RemotePayloadError(GraphQLRequestError):
    """The remote API answered with a payload that does not match its schema."""


class ActionNotAvailableError(DashboardError):
    def __init__(self, action: str, status: str):
        message = f"Action '{action}' is not available for an appointment with status '{status}'"
        super().__init__(message)
        self.action = action
        self.status = status
        self.message = message


def register_exception_handlers(app: FastAPI) -> None:

    @app.exception_handler(SessionError)
    async def handle_session_error(request: Request, exc: SessionError):
        logger.warning(f"Session error on {request.url.path}: {exc.message}")
        return JSONResponse(
            status_code=http_status.HTTP_403_FORBIDDEN,
            content={"error": "session_error", "title": "Session Error", "message": exc.message},
        )

    @app.exception_handler(ActionNotAvailableError)
    async def handle_action_not_available(request: Request, exc: ActionNotAvailableError):
        return JSONResponse(
            status_code=http_status.HTTP_409_CONFLICT,
            content={"error": "action_not_available", "message": exc.message},
        )
