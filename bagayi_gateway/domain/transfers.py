"""Transfer request builder - turns a routing decision into the record that gets persisted"""

from typing import Any, Dict, List, Optional, Tuple
from bagayi_gateway.domain.models import (
    INTER_SWITCH_CHANNEL_ID,
    MPESA_CHANNEL_ID,
    BuildResult,
    ChannelAction,
    ErrorKind,
    InterSwitchChannel,
    MpesaBusinessPayment,
    MpesaBuyGoods,
    MpesaPayBill,
    PaymentChannel,
    PersistedTransfer,
    RoutingDecision,
    RoutingMode,
    TransferError,
    TransferRequest,
    TransferStatus,
)
from bagayi_gateway.utils.date_utils import parse_transfer_date

CREATED_AT_IGNORED = "created_at_ignored"
EXTERNAL_ACCOUNT_KEY = "external_account"


def _present(value: str | None) -> bool:
    return value is not None and bool(value.strip())


def _clean(value: str | None) -> Optional[str]:
    return value.strip() if _present(value) else None


def _fail(kind: ErrorKind, message: str) -> BuildResult:
    return BuildResult(error=TransferError(kind=kind, message=message))


def _mpesa_channel(decision: RoutingDecision) -> Tuple[Optional[PaymentChannel], Optional[TransferError]]:
    if not _present(decision.destination):
        return None, TransferError(ErrorKind.MISSING_CHANNEL_FIELD, "Payment channel requires a destination")

    destination = decision.destination.strip()
    integration = decision.payment_integration_id

    if decision.action == ChannelAction.BUSINESS_PAYMENT:
        return MpesaBusinessPayment(to_account=destination, payment_integration=integration), None
    if decision.action == ChannelAction.BUSINESS_BUY_GOODS:
        return MpesaBuyGoods(to_account=destination, payment_integration=integration), None
    if decision.action == ChannelAction.BUSINESS_PAY_BILL:
        if not _present(decision.account_reference):
            return None, TransferError(
                ErrorKind.MISSING_CHANNEL_FIELD, "Paybill payments require an account reference"
            )
        return (
            MpesaPayBill(
                to_account=destination,
                account_reference=decision.account_reference.strip(),
                payment_integration=integration,
            ),
            None,
        )
    return None, TransferError(ErrorKind.MISSING_CHANNEL_FIELD, "Payment channel requires an action")


def _destination(decision: RoutingDecision) -> Tuple[Optional[str], Optional[PaymentChannel], Optional[TransferError]]:
    """Exactly one of (to_account_id, payment_channel) per routing mode"""
    if decision.mode == RoutingMode.DIRECT:
        return _clean(decision.to_account_id), None, None

    if decision.mode == RoutingMode.INTER_SWITCH:
        if not _present(decision.to_account_id):
            return None, None, None
        channel = InterSwitchChannel(
            to_account=decision.to_account_id.strip(),
            payment_integration=decision.payment_integration_id,
        )
        return None, channel, None

    if decision.mode == RoutingMode.MPESA_CHANNEL:
        channel, error = _mpesa_channel(decision)
        return None, channel, error

    raise ValueError(f"Unhandled routing mode: {decision.mode}")


def merge_metadata(request: TransferRequest) -> Optional[Dict[str, Any]]:
    """
    Combine external_account details with free-form entries.

    Entries with an empty key or value are dropped, as are entries that
    reuse the reserved external_account key. The result is None when
    nothing is left.
    """
    metadata: Dict[str, Any] = {}

    if request.external_account is not None:
        external = request.external_account.to_dict()
        if external:
            metadata[EXTERNAL_ACCOUNT_KEY] = external

    for entry in request.metadata:
        key, value = (entry.key or "").strip(), (entry.value or "").strip()
        if key and value and key != EXTERNAL_ACCOUNT_KEY:
            metadata[key] = value

    return metadata or None


def build_transfer(request: TransferRequest, decision: RoutingDecision, created_by: str) -> BuildResult:
    """
    Assemble the persisted transfer record from a request and its routing decision.

    Validation order:
    1. Destination shape (missing channel fields, to_account_id XOR payment_channel)
    2. External settlement transfers need complete external_account metadata
       and an external transaction id
    3. Inter-switch transfers into linked categories need an external transaction id

    An unparseable created_at is dropped and reported in BuildResult.warnings.
    """
    to_account_id, channel, error = _destination(decision)
    if error is not None:
        return BuildResult(error=error)

    if (to_account_id is None) == (channel is None):
        return _fail(
            ErrorKind.INVALID_DESTINATION,
            "Transfer must have exactly one of a destination account or a payment channel",
        )

    if decision.involves_external_account:
        details = request.external_account
        if details is None or not details.is_complete() or not _present(request.external_transaction_id):
            return _fail(
                ErrorKind.MISSING_EXTERNAL_ACCOUNT_METADATA,
                "External account details (ID, Name, and Type) and an External Transaction ID are "
                "required when transferring to/from an external account",
            )

    if decision.external_transaction_id_required and not _present(request.external_transaction_id):
        return _fail(
            ErrorKind.MISSING_EXTERNAL_TRANSACTION_ID,
            "External Transaction ID is required for transfers into a linked category",
        )

    warnings: List[str] = []
    created_at = parse_transfer_date(request.created_at)
    if created_at is None and _present(request.created_at):
        warnings.append(CREATED_AT_IGNORED)

    status = TransferStatus.SUBMITTED if request.status == TransferStatus.SUBMITTED.value else TransferStatus.DRAFT

    transfer = PersistedTransfer(
        from_account_id=request.from_account_id,
        amount=request.amount,
        type=request.type,
        status=status,
        created_by=created_by,
        routing_mode=decision.mode,
        to_account_id=to_account_id,
        payment_channel=channel,
        external_transaction_id=_clean(request.external_transaction_id),
        metadata=merge_metadata(request),
        description=_clean(request.description),
        label=_clean(request.label),
        created_at=created_at,
    )
    return BuildResult(transfer=transfer, warnings=warnings)


def channel_record(channel: PaymentChannel) -> Dict[str, Any]:
    """Serialize a payment channel variant to its stored payment_channel shape"""
    if isinstance(channel, InterSwitchChannel):
        record: Dict[str, Any] = {"channel_id": INTER_SWITCH_CHANNEL_ID, "to_account": channel.to_account}
    elif isinstance(channel, MpesaBusinessPayment):
        record = {
            "channel_id": MPESA_CHANNEL_ID,
            "action": ChannelAction.BUSINESS_PAYMENT.value,
            "to_account": channel.to_account,
        }
    elif isinstance(channel, MpesaBuyGoods):
        record = {
            "channel_id": MPESA_CHANNEL_ID,
            "action": ChannelAction.BUSINESS_BUY_GOODS.value,
            "to_account": channel.to_account,
        }
    elif isinstance(channel, MpesaPayBill):
        record = {
            "channel_id": MPESA_CHANNEL_ID,
            "action": ChannelAction.BUSINESS_PAY_BILL.value,
            "to_account": channel.to_account,
            "account_reference": channel.account_reference,
        }
    else:
        raise TypeError(f"Unknown payment channel: {type(channel).__name__}")

    if channel.payment_integration:
        record["payment_integration"] = channel.payment_integration
    return record


def transfer_record(transfer: PersistedTransfer) -> Dict[str, Any]:
    """Flatten a PersistedTransfer into a JSON-ready record; unused destination keys are omitted"""
    record: Dict[str, Any] = {
        "from_account_id": transfer.from_account_id,
        "amount": str(transfer.amount),
        "type": transfer.type.value,
        "status": transfer.status.value,
        "created_by": transfer.created_by,
    }

    if transfer.payment_channel is not None:
        record["payment_channel"] = channel_record(transfer.payment_channel)
    else:
        record["to_account_id"] = transfer.to_account_id

    optional = {
        "external_transaction_id": transfer.external_transaction_id,
        "metadata": transfer.metadata,
        "description": transfer.description,
        "label": transfer.label,
        "created_at": transfer.created_at.isoformat() if transfer.created_at else None,
    }
    record.update({key: value for key, value in optional.items() if value is not None})
    return record
