"""POST /v1/transfers/resolve and GET /v1/transfers/destinations - routing previews for the UI"""

import logging
from fastapi import APIRouter, Depends, HTTPException, Query, Request

from bagayi_gateway.api.v1.schemas import (
    AccountSchema,
    DestinationsResponse,
    RoutingDecisionResponse,
    TransferCreateRequest,
)
from bagayi_gateway.api.v1.errors import reject
from bagayi_gateway.api.dependencies import get_current_user_id, get_directory_client, get_request_id
from bagayi_gateway.infrastructure.clients.directory import DirectoryClient
from bagayi_gateway.domain.routing import destination_choices, route_transfer
from bagayi_gateway.domain.exceptions import AccountNotFoundError, DirectoryAPIError
from bagayi_gateway.infrastructure.observability.metrics import directory_fetch_failures_counter

router = APIRouter()


@router.post("/transfers/resolve", response_model=RoutingDecisionResponse)
async def resolve_transfer(
    request_body: TransferCreateRequest,
    request: Request,
    user_id: str = Depends(get_current_user_id),
    directory_client: DirectoryClient = Depends(get_directory_client),
):
    """
    Run the routing resolver without creating anything.

    The UI uses this to gate the transfer form (which fields are mandatory,
    which paybill integrations can be chosen); POST /v1/transfers re-runs
    the same resolver and stays authoritative.
    """
    request_id = get_request_id(request)

    try:
        directory = await directory_client.get_snapshot(user_id)
        routing = route_transfer(request_body.to_domain(), directory)
    except DirectoryAPIError as e:
        directory_fetch_failures_counter.inc()
        logging.error(f"Directory API error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=503, detail="Directory service unavailable")
    except AccountNotFoundError as e:
        raise HTTPException(status_code=404, detail={"error": str(e), "reason": "account_not_found"})

    if not routing.ok:
        raise reject(routing.error, request_id, user_id)

    decision = routing.decision
    return RoutingDecisionResponse(
        mode=decision.mode,
        to_account_id=decision.to_account_id,
        action=decision.action,
        destination=decision.destination,
        account_reference=decision.account_reference,
        payment_integration_id=decision.payment_integration_id,
        payment_integration_options=list(decision.payment_integration_options),
        external_transaction_id_required=decision.external_transaction_id_required,
        involves_external_account=decision.involves_external_account,
    )


@router.get("/transfers/destinations", response_model=DestinationsResponse)
async def get_destinations(
    request: Request,
    from_account_id: str = Query(..., description="Source account identifier"),
    user_id: str = Depends(get_current_user_id),
    directory_client: DirectoryClient = Depends(get_directory_client),
):
    """List the accounts a transfer from `from_account_id` may target"""
    request_id = get_request_id(request)

    try:
        directory = await directory_client.get_snapshot(user_id)
    except DirectoryAPIError as e:
        directory_fetch_failures_counter.inc()
        logging.error(f"Directory API error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=503, detail="Directory service unavailable")

    source = directory.get_account(from_account_id)
    if source is None:
        raise HTTPException(status_code=404, detail={"error": f"Account not found: {from_account_id}", "reason": "account_not_found"})

    accounts = [
        AccountSchema(id=account.id, name=account.name, category_id=account.category_id)
        for account in destination_choices(source, directory)
    ]
    return DestinationsResponse(from_account_id=from_account_id, accounts=accounts)
