"""
MFA router: validates the second factor of a user whose primary login was
already accepted upstream.
"""
from typing import Optional

from fastapi import APIRouter, Header, HTTPException, Request, Response, status

from ..errors import NoValidUserFound, VerificationFailed, VerificationServiceUnavailable
from ..observability.logging import StructuredLogger

router = APIRouter(prefix="/mfa", tags=["MFA"])

# Structured logger for this module
logger = StructuredLogger(__name__)


@router.post("/validate")
async def validate(
    request: Request,
    response: Response,
    x_authenticated_user: Optional[str] = Header(None),
):
    """
    Check the OTP fields of the submitted form against the user's devices.
    """
    if not x_authenticated_user:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="authentication required")

    service = request.app.state.mfa_service
    bindings = request.app.state.user_bindings.get(x_authenticated_user, [])

    try:
        await service.validate(response, request, x_authenticated_user, bindings)
    except NoValidUserFound:
        logger.warning("MFA validation rejected", username=x_authenticated_user)
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="authentication failed")
    except (VerificationServiceUnavailable, VerificationFailed) as e:
        logger.error("MFA validation error", username=x_authenticated_user, error=str(e))
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="MFA verification unavailable")

    logger.info("MFA validation succeeded", username=x_authenticated_user)
    return {"status": "ok", "user": x_authenticated_user}


@router.get("/providers")
async def list_providers(request: Request):
    return {"providers": request.app.state.mfa_service.provider_ids()}
