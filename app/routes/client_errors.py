"""
Client error intake.

Browser clients post uncaught errors here; reports are only logged.
"""

from datetime import datetime, timezone

from fastapi import APIRouter, Request

from app.features.communications.domain.errors import InvalidParameter
from app.infrastructure.observability.logging import get_logger
from app.models.api.communication_response import ErrorReportReceivedResponse

logger = get_logger("client_errors")

router = APIRouter(prefix="/api", tags=["client-errors"])


@router.post("/errors", response_model=ErrorReportReceivedResponse)
async def report_client_error(request: Request) -> ErrorReportReceivedResponse:
    try:
        report = await request.json()
    except ValueError:
        raise InvalidParameter("Failed to process error report") from None

    if not isinstance(report, dict):
        raise InvalidParameter("Failed to process error report")

    # Older clients send the message under "error"
    message = report.get("message") or report.get("error")
    if not message or not report.get("timestamp") or not report.get("url"):
        raise InvalidParameter("Missing required fields")

    logger.error(
        "Client error report",
        type=report.get("type"),
        message=message,
        stack=report.get("stack"),
        component_stack=report.get("componentStack"),
        client_timestamp=report.get("timestamp"),
        url=report.get("url"),
        received_at=datetime.now(timezone.utc).isoformat(),
    )

    return ErrorReportReceivedResponse(received=True)
