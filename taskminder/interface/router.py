"""Thin HTTP surface: the daily reminder trigger and completion entry points."""

import logging
import secrets
from datetime import datetime
from urllib.parse import urlencode

from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.responses import JSONResponse, RedirectResponse
from pydantic import BaseModel

from taskminder.core.config import constants, settings
from taskminder.core.errors import ErrorCode, StoreUnavailableError, classify_completion_error
from taskminder.core.message_templates import dashboard_link
from taskminder.services import completion_service, notification_service


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["api"])


class CompleteTaskRequest(BaseModel):
    """Optional body for completing a task by ID."""

    completed_at: datetime | None = None
    notes: str | None = None


async def require_cron_secret(request: Request) -> None:
    """Reject trigger calls without `Authorization: Bearer <cron_secret>`.

    Every call is rejected while no secret is configured.
    """
    expected = settings.cron_secret
    provided = request.headers.get("authorization", "")

    if not expected or not secrets.compare_digest(provided.encode(), f"Bearer {expected}".encode()):
        logger.warning("cron_auth_rejected", extra={"path": request.url.path})
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")


@router.get("/cron/send-reminders", dependencies=[Depends(require_cron_secret)])
async def send_reminders() -> JSONResponse:
    """Run today's reminder dispatch and return its summary.

    Responds 200 whenever the run completes, even if some recipients failed, and
    401 on a missing or wrong secret. If the task store cannot be read the batch
    fails with no progress and the response is 503 with `{"error": ...}`.
    """
    try:
        summary = await notification_service.run_daily_reminders()
    except StoreUnavailableError as e:
        logger.error("cron_run_failed", extra={"error": str(e)})
        return JSONResponse(
            content={"error": "Task store unavailable"},
            status_code=constants.HTTP_SERVICE_UNAVAILABLE,
        )

    return JSONResponse(content=summary.model_dump(mode="json", by_alias=True), status_code=constants.HTTP_OK)


def _dashboard_redirect(**params: str) -> RedirectResponse:
    return RedirectResponse(url=f"{dashboard_link(app_url=settings.app_url)}?{urlencode(params)}")


@router.get("/tasks/complete")
async def complete_from_link(token: str | None = None) -> RedirectResponse:
    """Complete a task from a reminder link and redirect to the dashboard."""
    if not token:
        return _dashboard_redirect(error=ErrorCode.MISSING_TOKEN)

    try:
        result = await completion_service.complete_task(token=token)
    except Exception as e:
        error = classify_completion_error(e)
        logger.warning("completion_link_failed", extra={"code": error.code, "error": str(e)})
        return _dashboard_redirect(error=error.code)

    return _dashboard_redirect(completed="true", task=result.title)


@router.post("/tasks/{task_id}/complete")
async def complete_by_id(task_id: str, body: CompleteTaskRequest | None = None) -> JSONResponse:
    """Complete a task by ID and return the new next due date."""
    body = body or CompleteTaskRequest()

    try:
        result = await completion_service.complete_task(
            task_id=task_id,
            completed_at=body.completed_at,
            notes=body.notes,
        )
    except Exception as e:
        error = classify_completion_error(e)
        logger.warning("completion_failed", extra={"task_id": task_id, "code": error.code, "error": str(e)})
        status_code = (
            status.HTTP_404_NOT_FOUND if error.code == ErrorCode.TASK_NOT_FOUND else constants.HTTP_BAD_REQUEST
        )
        if error.code == ErrorCode.SERVER_ERROR:
            status_code = constants.HTTP_SERVER_ERROR
        return JSONResponse(
            content={"success": False, "error": error.code, "message": error.message},
            status_code=status_code,
        )

    return JSONResponse(
        content={"success": True, "next_due_date": result.next_due_date.isoformat()},
        status_code=constants.HTTP_OK,
    )
