"""Inbound email webhook endpoints.

Mail providers POST every reply sent to a reply+<survey-id>@ address here.
Status codes tell the provider whether to retry: 2xx for handled (including
replies to surveys that take no replies), 4xx for replies that can never
succeed, 5xx for store failures worth retrying.
"""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session
from starlette.concurrency import run_in_threadpool

from config import settings
from database import get_db
from domain.replies.errors import IngestionError
from .schemas import ErrorResponse, IngestionResponse, RepliesDisabledResponse
from .service import ReplyIngestionService
from .transport import PayloadError, decode_request, verify_webhook_secret

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/inbound-email", tags=["Inbound Email"])


def _error(message: str, status_code: int) -> JSONResponse:
    return JSONResponse(
        content=ErrorResponse(error=message).model_dump(),
        status_code=status_code,
    )


@router.post(
    "",
    response_model=IngestionResponse,
    responses={
        400: {"model": ErrorResponse},
        401: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
    },
)
async def receive_inbound_email(
    request: Request,
    db: Annotated[Session, Depends(get_db)],
):
    """Ingest one survey reply.

    Accepts JSON, multipart/url-encoded form posts, or a raw JSON body.
    When INBOUND_EMAIL_SECRET is set, the request must carry it in
    X-Webhook-Secret or as a bearer token.
    """
    if not verify_webhook_secret(settings.INBOUND_EMAIL_SECRET, request.headers):
        logger.warning("Rejected inbound email with missing or wrong webhook secret")
        return _error("Unauthorized", status.HTTP_401_UNAUTHORIZED)

    try:
        payload = await decode_request(request)
    except PayloadError as e:
        logger.warning(f"Rejected inbound email payload: {e}")
        return _error(str(e), status.HTTP_400_BAD_REQUEST)

    service = ReplyIngestionService(db)
    try:
        result = await run_in_threadpool(
            service.ingest,
            payload.from_address,
            payload.to_address,
            payload.subject,
            payload.body,
        )
    except IngestionError as e:
        if e.http_status >= 500:
            return _error("Failed to process inbound email", e.http_status)
        return _error(e.message, e.http_status)
    except Exception:
        logger.exception("Inbound email processing failed")
        return _error("Failed to process inbound email", status.HTTP_500_INTERNAL_SERVER_ERROR)

    if result.replies_disabled:
        return JSONResponse(
            content=RepliesDisabledResponse(survey_id=result.survey_id).model_dump(),
            status_code=status.HTTP_200_OK,
        )

    return IngestionResponse(
        survey_id=result.survey_id,
        responses_processed=result.responses_processed,
        free_text_saved=result.free_text_saved,
    )


@router.get("")
def inbound_email_info():
    """Describe the webhook for provider setup and smoke tests."""
    return {
        "status": "ok",
        "message": "Inbound email webhook is ready",
        "endpoint": "/api/inbound-email",
        "methods": ["POST"],
        "formats": [
            "application/json",
            "multipart/form-data",
            "application/x-www-form-urlencoded",
        ],
    }
