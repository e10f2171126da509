"""Domain models - pure Python dataclasses representing accounts, categories and transfers"""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple, Union

INTER_SWITCH_CHANNEL_ID = "bagayi_inter_switch"
MPESA_CHANNEL_ID = "MPESA"


class TransferType(str, Enum):
    PAYMENT = "payment"
    FEES = "fees"
    REFUND = "refund"
    ADJUSTMENT = "adjustment"


class TransferStatus(str, Enum):
    DRAFT = "draft"
    SUBMITTED = "submitted"
    PENDING = "pending"
    POSTED = "posted"
    FAILED = "failed"


class RoutingMode(str, Enum):
    DIRECT = "direct"
    INTER_SWITCH = "inter_switch"
    MPESA_CHANNEL = "mpesa_channel"


class ChannelAction(str, Enum):
    """M-Pesa mechanisms, distinguished by destination format"""

    BUSINESS_PAYMENT = "BusinessPayment"  # phone number (send money)
    BUSINESS_BUY_GOODS = "BusinessBuyGoods"  # till number
    BUSINESS_PAY_BILL = "BusinessPayBill"  # paybill number + account reference


class ErrorKind(str, Enum):
    INVALID_DESTINATION = "invalid_destination"
    MISSING_CHANNEL_FIELD = "missing_channel_field"
    NON_POSITIVE_AMOUNT = "non_positive_amount"
    SAME_ACCOUNT = "same_account"
    MISSING_EXTERNAL_TRANSACTION_ID = "missing_external_transaction_id"
    MISSING_EXTERNAL_ACCOUNT_METADATA = "missing_external_account_metadata"


@dataclass(frozen=True)
class Account:
    """Ledger account owned by a category"""

    id: str
    name: str
    category_id: Optional[str]  # None only for the external settlement account


@dataclass(frozen=True)
class Category:
    """Category node with its payment-integration linkage"""

    id: str
    name: str
    parent_id: Optional[str] = None
    is_linked: bool = False
    default_account_id: Optional[str] = None
    payment_integration_id: Optional[str] = None
    has_b2c_paybill: bool = False
    b2c_paybill_id: Optional[str] = None

    @property
    def is_root(self) -> bool:
        return self.parent_id is None


@dataclass(frozen=True)
class ChannelTarget:
    """Explicit M-Pesa destination used instead of a ledger account"""

    action: ChannelAction
    destination: str
    reference: Optional[str] = None


@dataclass(frozen=True)
class ExternalAccountDetails:
    """Reconciliation details for the counterparty of an external settlement transfer"""

    id: str = ""
    name: str = ""
    type: str = ""

    def is_complete(self) -> bool:
        return all(value.strip() for value in (self.id, self.name, self.type))

    def to_dict(self) -> Dict[str, str]:
        fields = {"id": self.id, "name": self.name, "type": self.type}
        return {key: value.strip() for key, value in fields.items() if value.strip()}


@dataclass(frozen=True)
class MetadataEntry:
    key: str
    value: str


@dataclass
class TransferRequest:
    """Proposed transfer as submitted by the caller"""

    from_account_id: str
    amount: Decimal
    type: TransferType
    to_account_id: Optional[str] = None
    channel_target: Optional[ChannelTarget] = None
    description: Optional[str] = None
    label: Optional[str] = None
    created_at: Optional[str] = None
    external_transaction_id: Optional[str] = None
    external_account: Optional[ExternalAccountDetails] = None
    metadata: List[MetadataEntry] = field(default_factory=list)
    status: Optional[str] = None
    payment_integration_id: Optional[str] = None


@dataclass(frozen=True)
class TransferError:
    kind: ErrorKind
    message: str


@dataclass(frozen=True)
class RoutingDecision:
    """Output of the routing resolver"""

    mode: RoutingMode
    to_account_id: Optional[str] = None  # Direct destination, or the inter-switch default account
    action: Optional[ChannelAction] = None
    destination: Optional[str] = None
    account_reference: Optional[str] = None
    payment_integration_id: Optional[str] = None
    payment_integration_options: Tuple[str, ...] = ()
    external_transaction_id_required: bool = False
    involves_external_account: bool = False


@dataclass(frozen=True)
class RoutingResult:
    decision: Optional[RoutingDecision] = None
    error: Optional[TransferError] = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass(frozen=True)
class InterSwitchChannel:
    to_account: str
    payment_integration: Optional[str] = None


@dataclass(frozen=True)
class MpesaBusinessPayment:
    to_account: str
    payment_integration: Optional[str] = None


@dataclass(frozen=True)
class MpesaBuyGoods:
    to_account: str
    payment_integration: Optional[str] = None


@dataclass(frozen=True)
class MpesaPayBill:
    to_account: str
    account_reference: str
    payment_integration: Optional[str] = None


PaymentChannel = Union[InterSwitchChannel, MpesaBusinessPayment, MpesaBuyGoods, MpesaPayBill]


@dataclass
class PersistedTransfer:
    """Transfer record handed to the persistence gateway"""

    from_account_id: str
    amount: Decimal
    type: TransferType
    status: TransferStatus
    created_by: str
    routing_mode: RoutingMode
    to_account_id: Optional[str] = None
    payment_channel: Optional[PaymentChannel] = None
    external_transaction_id: Optional[str] = None
    metadata: Optional[Dict[str, Any]] = None
    description: Optional[str] = None
    label: Optional[str] = None
    created_at: Optional[datetime] = None


@dataclass
class BuildResult:
    transfer: Optional[PersistedTransfer] = None
    error: Optional[TransferError] = None
    warnings: List[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass(frozen=True)
class FrequentRecipient:
    """Aggregated M-Pesa destination used by a user's past transfers"""

    to_account: str
    action: ChannelAction
    count: int
    last_used: datetime
    from_account_id: str
    account_reference: Optional[str] = None
    recipient_name: Optional[str] = None
