"""GET /v1/transfers and GET /v1/transfers/frequent - transfer history endpoints"""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from bagayi_gateway.api.v1.schemas import (
    FrequentRecipientSchema,
    FrequentRecipientsResponse,
    TransferListResponse,
)
from bagayi_gateway.api.v1.transfers import to_transfer_response
from bagayi_gateway.api.dependencies import get_current_user_id
from bagayi_gateway.infrastructure.database.session import get_db
from bagayi_gateway.infrastructure.database.repositories import TransferRepository
from bagayi_gateway.domain.models import ChannelAction
from bagayi_gateway.domain.recipients import frequent_recipients

router = APIRouter()


@router.get("/transfers", response_model=TransferListResponse)
def list_transfers(
    account_id: str = Query(..., description="Account identifier"),
    limit: int = Query(50, ge=1, le=200),
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """
    Retrieve the acting user's recent transfers into or out of an account.

    Returns:
        Transfers, newest first
    """
    repo = TransferRepository(db)
    transfers = repo.get_transfers_by_account(account_id, created_by=user_id, limit=limit)

    return TransferListResponse(
        account_id=account_id,
        transfers=[to_transfer_response(t) for t in transfers],
    )


@router.get("/transfers/frequent", response_model=FrequentRecipientsResponse)
def get_frequent_recipients(
    action: ChannelAction = Query(..., description="BusinessPayment, BusinessBuyGoods or BusinessPayBill"),
    from_account_id: str | None = Query(None),
    limit: int = Query(10, ge=1, le=50),
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """Most used M-Pesa destinations for the acting user"""
    repo = TransferRepository(db)
    records = repo.get_channel_transfers(user_id)

    recipients = frequent_recipients(
        ((t.payment_channel, t.from_account_id, t.created_at) for t in records),
        action,
        from_account_id=from_account_id,
        limit=limit,
    )

    return FrequentRecipientsResponse(
        action=action,
        recipients=[
            FrequentRecipientSchema(
                to_account=r.to_account,
                account_reference=r.account_reference,
                recipient_name=r.recipient_name,
                count=r.count,
                from_account_id=r.from_account_id,
                last_used=r.last_used.isoformat(),
            )
            for r in recipients
        ],
    )
