"""Frequent M-Pesa recipients aggregated from past channel transfers"""

from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional, Tuple
from bagayi_gateway.domain.models import MPESA_CHANNEL_ID, ChannelAction, FrequentRecipient


def frequent_recipients(
    transfers: Iterable[Tuple[Dict[str, Any], str, datetime]],
    action: ChannelAction,
    from_account_id: str | None = None,
    limit: int = 10,
) -> List[FrequentRecipient]:
    """
    Group past channel transfers of one action by destination.

    Args:
        transfers: (payment_channel record, from_account_id, created_at) triples
        action: only channels with this M-Pesa action are counted
        from_account_id: restrict to transfers out of this account
        limit: maximum recipients returned

    Returns:
        Recipients ordered by use count, then most recent use
    """
    grouped: Dict[Tuple[str, Optional[str]], Dict[str, Any]] = {}

    for channel, source_id, created_at in transfers:
        if not channel or channel.get("channel_id") != MPESA_CHANNEL_ID:
            continue
        if channel.get("action") != action.value:
            continue
        if from_account_id is not None and source_id != from_account_id:
            continue

        to_account = channel.get("to_account")
        if not to_account:
            continue

        # Paybill destinations are distinct per account reference
        reference = channel.get("account_reference") if action == ChannelAction.BUSINESS_PAY_BILL else None
        key = (to_account, reference)

        entry = grouped.setdefault(
            key,
            {"count": 0, "last_used": created_at, "from_account_id": source_id, "recipient_name": None},
        )
        entry["count"] += 1
        if created_at >= entry["last_used"]:
            entry["last_used"] = created_at
            entry["from_account_id"] = source_id
            entry["recipient_name"] = channel.get("recipient_name") or entry["recipient_name"]

    recipients = [
        FrequentRecipient(
            to_account=to_account,
            action=action,
            count=entry["count"],
            last_used=entry["last_used"],
            from_account_id=entry["from_account_id"],
            account_reference=reference,
            recipient_name=entry["recipient_name"],
        )
        for (to_account, reference), entry in grouped.items()
    ]
    recipients.sort(key=lambda r: (r.count, r.last_used), reverse=True)
    return recipients[:limit]
