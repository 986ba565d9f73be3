# Purpose: Approval email route used by the admin screens once a registration is verified.
from __future__ import annotations

import logging
import smtplib

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from resume_validation.api.deps import get_email_notifier
from resume_validation.schemas.validation import ApprovalEmailRequest
from resume_validation.services.notifications.email_service import EmailNotifier

logger = logging.getLogger("api.notifications")

router = APIRouter(prefix="/api", tags=["notifications"])


@router.post("/send-approval-email")
def send_approval_email(
    payload: ApprovalEmailRequest,
    notifier: EmailNotifier = Depends(get_email_notifier),
):
    if not payload.email or not payload.password:
        return JSONResponse(status_code=400, content={"error": "Missing required fields"})

    try:
        notifier.send_approval_email(
            email=payload.email,
            name=payload.name or "",
            roll_number=payload.roll_number or "",
            password=payload.password,
            login_url=payload.login_url or "",
        )
    except (smtplib.SMTPException, OSError, ValueError) as e:
        logger.error("Error sending email to %s: %s", payload.email, e)
        return JSONResponse(status_code=500, content={"success": False, "error": "Failed to send email"})

    return {"success": True, "message": "Email sent successfully"}
