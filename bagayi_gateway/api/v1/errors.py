"""Mapping of routing/build rejections to HTTP errors"""

from fastapi import HTTPException

from bagayi_gateway.domain.models import TransferError
from bagayi_gateway.infrastructure.observability.metrics import record_rejection
from bagayi_gateway.infrastructure.observability.logging import log_rejection


def reject(error: TransferError, request_id: str, user_id: str) -> HTTPException:
    """Record a validation rejection and build the 400 the client shows as 'fix your input'"""
    record_rejection(error.kind.value)
    log_rejection(request_id, user_id, error.kind.value, error.message)
    return HTTPException(
        status_code=400,
        detail={"error": error.message, "reason": error.kind.value},
    )
