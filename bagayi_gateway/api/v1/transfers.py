"""POST /v1/transfers and GET /v1/transfers/{transfer_id} - transfer creation endpoints"""

import time
import uuid
import logging
from typing import List
from fastapi import APIRouter, Depends, HTTPException, BackgroundTasks, Request
from sqlalchemy.orm import Session

from bagayi_gateway.api.v1.schemas import TransferCreateRequest, TransferResponse
from bagayi_gateway.api.v1.errors import reject
from bagayi_gateway.api.dependencies import (
    get_current_user_id,
    get_directory_client,
    get_payment_events_client,
    get_request_id,
)
from bagayi_gateway.infrastructure.database.session import get_db
from bagayi_gateway.infrastructure.database.models import TransferRecord
from bagayi_gateway.infrastructure.database.repositories import TransferRepository
from bagayi_gateway.infrastructure.clients.directory import DirectoryClient
from bagayi_gateway.infrastructure.clients.payment_events import PaymentEventsClient
from bagayi_gateway.domain.models import TransferStatus
from bagayi_gateway.domain.routing import route_transfer
from bagayi_gateway.domain.transfers import build_transfer
from bagayi_gateway.domain.exceptions import AccountNotFoundError, DirectoryAPIError
from bagayi_gateway.infrastructure.observability.metrics import record_transfer, directory_fetch_failures_counter
from bagayi_gateway.infrastructure.observability.logging import log_transfer

router = APIRouter()


def to_transfer_response(db_transfer: TransferRecord, warnings: List[str] | None = None) -> TransferResponse:
    return TransferResponse(
        transfer_id=str(db_transfer.id),
        from_account_id=db_transfer.from_account_id,
        to_account_id=db_transfer.to_account_id,
        payment_channel=db_transfer.payment_channel,
        amount=db_transfer.amount,
        type=db_transfer.type,
        status=db_transfer.status,
        routing_mode=db_transfer.routing_mode,
        created_by=db_transfer.created_by,
        external_transaction_id=db_transfer.external_transaction_id,
        metadata=db_transfer.transfer_metadata,
        description=db_transfer.description,
        label=db_transfer.label,
        created_at=db_transfer.created_at.isoformat(),
        warnings=warnings or [],
    )


@router.post("/transfers", response_model=TransferResponse, status_code=201)
async def create_transfer(
    request_body: TransferCreateRequest,
    background_tasks: BackgroundTasks,
    request: Request,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
    directory_client: DirectoryClient = Depends(get_directory_client),
    events_client: PaymentEventsClient = Depends(get_payment_events_client),
):
    """
    Create a transfer after routing it through the shared resolver.

    Flow:
    1. Fetch the user's account/category directory snapshot
    2. Resolve routing (direct / inter-switch / M-Pesa channel)
    3. Build the persisted record (channel shape, metadata, external ids)
    4. Persist the transfer
    5. Notify the payment backend of submitted transfers (background)
    """
    start_time = time.time()
    request_id = get_request_id(request)

    try:
        # 1. Directory snapshot for this request
        directory = await directory_client.get_snapshot(user_id)

        # 2. Routing decision
        transfer_request = request_body.to_domain()
        routing = route_transfer(transfer_request, directory)
        if not routing.ok:
            raise reject(routing.error, request_id, user_id)

        decision = routing.decision
        if request_body.payment_integration_id and decision.payment_integration_id != request_body.payment_integration_id:
            logging.warning(
                "Requested payment integration not available, using default",
                extra={
                    "request_id": request_id,
                    "requested_integration": request_body.payment_integration_id,
                    "payment_integration": decision.payment_integration_id,
                },
            )

        # 3. Build the record
        built = build_transfer(transfer_request, decision, created_by=user_id)
        if not built.ok:
            raise reject(built.error, request_id, user_id)

        # 4. Persist
        repo = TransferRepository(db)
        db_transfer = repo.create_transfer(built.transfer)
        db.commit()
        db.refresh(db_transfer)

        # 5. Hand submitted transfers to the payment backend
        if db_transfer.status == TransferStatus.SUBMITTED.value:
            background_tasks.add_task(
                events_client.send_transfer_event,
                {
                    "event": "TRANSFER_SUBMITTED",
                    "transfer_id": str(db_transfer.id),
                    "routing_mode": db_transfer.routing_mode,
                    "from_account_id": db_transfer.from_account_id,
                    "to_account_id": db_transfer.to_account_id,
                    "payment_channel": db_transfer.payment_channel,
                    "amount": str(db_transfer.amount),
                    "created_by": user_id,
                },
            )

        duration_ms = (time.time() - start_time) * 1000
        record_transfer(db_transfer.routing_mode, db_transfer.status)
        log_transfer(request_id, user_id, str(db_transfer.id), db_transfer.routing_mode, db_transfer.status, duration_ms)

        return to_transfer_response(db_transfer, built.warnings)

    except HTTPException:
        db.rollback()
        raise

    except DirectoryAPIError as e:
        directory_fetch_failures_counter.inc()
        db.rollback()
        logging.error(f"Directory API error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=503, detail="Directory service unavailable")

    except AccountNotFoundError as e:
        db.rollback()
        logging.warning(f"Unknown account: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=404, detail={"error": str(e), "reason": "account_not_found"})

    except Exception as e:
        db.rollback()
        logging.error(f"Unexpected error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail="Internal server error")


@router.get("/transfers/{transfer_id}", response_model=TransferResponse)
def get_transfer(
    transfer_id: str,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """Retrieve a single transfer created by the acting user"""
    try:
        transfer_uuid = uuid.UUID(transfer_id)
    except ValueError:
        raise HTTPException(status_code=400, detail="Invalid transfer ID format")

    repo = TransferRepository(db)
    db_transfer = repo.get_transfer_by_id(transfer_uuid)

    # Other users' transfers are reported as missing
    if not db_transfer or db_transfer.created_by != user_id:
        raise HTTPException(status_code=404, detail="Transfer not found")

    return to_transfer_response(db_transfer)
