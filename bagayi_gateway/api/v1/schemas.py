"""Pydantic schemas for API request/response validation"""

from decimal import Decimal
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, Field

from bagayi_gateway.domain.models import (
    ChannelAction,
    ChannelTarget,
    ExternalAccountDetails,
    MetadataEntry,
    RoutingMode,
    TransferRequest,
    TransferType,
)


class ChannelTargetSchema(BaseModel):
    """M-Pesa destination: till, paybill number + reference, or phone number"""

    action: ChannelAction
    destination: str
    account_reference: Optional[str] = None


class ExternalAccountSchema(BaseModel):
    id: Optional[str] = None
    name: Optional[str] = None
    type: Optional[str] = None


class MetadataEntrySchema(BaseModel):
    key: str = ""
    value: str = ""


class TransferCreateRequest(BaseModel):
    """Request body for POST /v1/transfers and POST /v1/transfers/resolve"""

    from_account_id: str = Field(..., min_length=1, description="Source account identifier")
    to_account_id: Optional[str] = Field(None, description="Destination account (excludes payment_channel)")
    payment_channel: Optional[ChannelTargetSchema] = None
    amount: Decimal = Field(..., description="Transfer amount; must be positive")
    type: TransferType = TransferType.PAYMENT
    status: Optional[str] = Field(None, description="'submitted' to submit immediately, otherwise draft")
    description: Optional[str] = None
    label: Optional[str] = None
    created_at: Optional[str] = Field(None, description="ISO date or datetime override")
    external_transaction_id: Optional[str] = None
    external_account: Optional[ExternalAccountSchema] = None
    metadata: List[MetadataEntrySchema] = Field(default_factory=list)
    payment_integration_id: Optional[str] = Field(None, description="Main or B2C paybill selection")

    def to_domain(self) -> TransferRequest:
        channel = None
        if self.payment_channel is not None:
            channel = ChannelTarget(
                action=self.payment_channel.action,
                destination=self.payment_channel.destination,
                reference=self.payment_channel.account_reference,
            )

        external = None
        if self.external_account is not None:
            external = ExternalAccountDetails(
                id=self.external_account.id or "",
                name=self.external_account.name or "",
                type=self.external_account.type or "",
            )

        return TransferRequest(
            from_account_id=self.from_account_id,
            amount=self.amount,
            type=self.type,
            to_account_id=self.to_account_id,
            channel_target=channel,
            description=self.description,
            label=self.label,
            created_at=self.created_at,
            external_transaction_id=self.external_transaction_id,
            external_account=external,
            metadata=[MetadataEntry(key=entry.key, value=entry.value) for entry in self.metadata],
            status=self.status,
            payment_integration_id=self.payment_integration_id,
        )


class RoutingDecisionResponse(BaseModel):
    """Response for POST /v1/transfers/resolve"""

    mode: RoutingMode
    to_account_id: Optional[str] = None
    action: Optional[ChannelAction] = None
    destination: Optional[str] = None
    account_reference: Optional[str] = None
    payment_integration_id: Optional[str] = None
    payment_integration_options: List[str] = Field(default_factory=list)
    external_transaction_id_required: bool
    involves_external_account: bool


class AccountSchema(BaseModel):
    id: str
    name: str
    category_id: Optional[str] = None


class DestinationsResponse(BaseModel):
    """Response for GET /v1/transfers/destinations"""

    from_account_id: str
    accounts: List[AccountSchema]


class TransferResponse(BaseModel):
    """Single persisted transfer"""

    transfer_id: str
    from_account_id: str
    to_account_id: Optional[str] = None
    payment_channel: Optional[Dict[str, Any]] = None
    amount: Decimal
    type: str
    status: str
    routing_mode: str
    created_by: str
    external_transaction_id: Optional[str] = None
    metadata: Optional[Dict[str, Any]] = None
    description: Optional[str] = None
    label: Optional[str] = None
    created_at: str
    warnings: List[str] = Field(default_factory=list)


class TransferListResponse(BaseModel):
    """Response for GET /v1/transfers"""

    account_id: str
    transfers: List[TransferResponse]


class FrequentRecipientSchema(BaseModel):
    to_account: str
    account_reference: Optional[str] = None
    recipient_name: Optional[str] = None
    count: int
    from_account_id: str
    last_used: str


class FrequentRecipientsResponse(BaseModel):
    """Response for GET /v1/transfers/frequent"""

    action: ChannelAction
    recipients: List[FrequentRecipientSchema]
