"""
Trial Router - API endpoints for trial lifecycle and download guardrails
"""
import logging
from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field

from auth import get_current_user
from dependencies import get_guardrail_service, get_trial_service
from models.trial import NudgeType
from services.exceptions import DownloadLimitExceeded, StoreUnavailable
from services.guardrail_service import GuardrailService
from services.nudge_messages import get_nudge_message
from services.trial_service import TrialService
from utils.responses import success_response, error_response

logger = logging.getLogger(__name__)

UPGRADE_URL = "/upgrade"
LOW_DOWNLOADS_WARNING = 2

# HTTP status for each failed lifecycle result
RESULT_ERROR_STATUS = {
    "already_used_trial": 409,
    "already_subscribed": 409,
    "store_unavailable": 503,
}

trial_router = APIRouter(prefix="/api/trial", tags=["trial"])


class DownloadRequest(BaseModel):
    resource: str = Field(..., min_length=1)


class HeartbeatRequest(BaseModel):
    device_id: str = Field(..., min_length=1, max_length=128)


def _result_response(result):
    if result.success:
        return success_response(data=result.model_dump(), message=result.message)
    return error_response(
        result.error,
        status=RESULT_ERROR_STATUS.get(result.error, 400),
        message=result.message,
        data=result.model_dump(),
    )


@trial_router.post("/start")
async def start_trial(
    current_user: dict = Depends(get_current_user),
    trial_service: TrialService = Depends(get_trial_service),
):
    """Start the 45-day free trial for the signed-in user"""
    result = await trial_service.start_trial(current_user["user_id"], current_user.get("email"))
    return _result_response(result)


@trial_router.get("/status")
async def get_trial_status(
    current_user: dict = Depends(get_current_user),
    trial_service: TrialService = Depends(get_trial_service),
):
    """Trial status plus the nudge message to show, if any"""
    status = await trial_service.get_trial_status(current_user["user_id"])
    nudge_message = None
    # Premium access without an active trial means the user has converted
    if not (status.can_access_premium and not status.is_active):
        nudge_message = get_nudge_message(status.nudge_type, status.days_remaining)
    return success_response(
        data={"status": status.model_dump(), "nudge_message": nudge_message},
        message="Trial status retrieved successfully",
    )


@trial_router.get("/guardrails")
async def check_guardrails(
    current_user: dict = Depends(get_current_user),
    guardrail_service: GuardrailService = Depends(get_guardrail_service),
):
    guardrails = await guardrail_service.check_guardrails(current_user["user_id"])
    return success_response(data=guardrails.model_dump(), message="Guardrails retrieved successfully")


@trial_router.get("/downloads/authorize")
async def authorize_download(
    current_user: dict = Depends(get_current_user),
    guardrail_service: GuardrailService = Depends(get_guardrail_service),
):
    """Check whether the user may download right now, without logging a download"""
    try:
        await guardrail_service.authorize_download(current_user["user_id"])
    except DownloadLimitExceeded as e:
        return _limit_response(e)
    return success_response(data={"authorized": True}, message="Download authorized")


@trial_router.post("/downloads")
async def record_download(
    request: DownloadRequest,
    current_user: dict = Depends(get_current_user),
    guardrail_service: GuardrailService = Depends(get_guardrail_service),
):
    """Authorize and log a download"""
    try:
        guardrails = await guardrail_service.record_download(current_user["user_id"], request.resource)
    except DownloadLimitExceeded as e:
        return _limit_response(e)
    except StoreUnavailable as e:
        logger.error(f"Failed to record download for user {current_user['user_id']}: {e}")
        return error_response(e.code, status=503, message="Failed to record download")

    message = "Download recorded"
    if guardrails.downloads_remaining <= LOW_DOWNLOADS_WARNING:
        message = f"{guardrails.downloads_remaining} downloads remaining today"
    return success_response(data=guardrails.model_dump(), message=message)


@trial_router.post("/sessions/heartbeat")
async def session_heartbeat(
    request: HeartbeatRequest,
    current_user: dict = Depends(get_current_user),
    guardrail_service: GuardrailService = Depends(get_guardrail_service),
):
    """Mark the caller's device as active for the concurrent device count"""
    try:
        guardrails = await guardrail_service.record_activity(current_user["user_id"], request.device_id)
    except StoreUnavailable as e:
        logger.error(f"Failed to record activity for user {current_user['user_id']}: {e}")
        return error_response(e.code, status=503, message="Failed to record session activity")
    return success_response(data=guardrails.model_dump(), message="Session activity recorded")


@trial_router.get("/nudge")
async def nudge_message(
    nudge_type: NudgeType = Query(...),
    days_remaining: int = Query(0, ge=0),
):
    return success_response(data={"message": get_nudge_message(nudge_type, days_remaining)})


def _limit_response(e: DownloadLimitExceeded):
    return error_response(
        e.code,
        status=429,
        message=str(e),
        data={"limit": e.limit, "upgrade_url": UPGRADE_URL},
    )
