"""Unit tests for the transfer request builder"""

import json
import pytest
from datetime import datetime, timezone
from decimal import Decimal
from bagayi_gateway.domain.models import (
    ChannelAction,
    ErrorKind,
    ExternalAccountDetails,
    InterSwitchChannel,
    MetadataEntry,
    MpesaBuyGoods,
    MpesaPayBill,
    RoutingDecision,
    RoutingMode,
    TransferRequest,
    TransferStatus,
    TransferType,
)
from bagayi_gateway.domain.routing import route_transfer
from bagayi_gateway.domain.transfers import CREATED_AT_IGNORED, build_transfer, transfer_record

USER_ID = "user:alice"


def _request(**overrides) -> TransferRequest:
    fields = {
        "from_account_id": "account:household_main",
        "amount": Decimal("500"),
        "type": TransferType.PAYMENT,
        "to_account_id": "account:household_misc",
    }
    fields.update(overrides)
    return TransferRequest(**fields)


DIRECT = RoutingDecision(mode=RoutingMode.DIRECT, to_account_id="account:household_misc")
INTER_SWITCH = RoutingDecision(mode=RoutingMode.INTER_SWITCH, to_account_id="account:savings_main")
INTER_SWITCH_LINKED = RoutingDecision(
    mode=RoutingMode.INTER_SWITCH,
    to_account_id="account:rent_main",
    payment_integration_id="mpesa:rent_paybill",
    payment_integration_options=("mpesa:rent_paybill",),
    external_transaction_id_required=True,
)
EXTERNAL = RoutingDecision(
    mode=RoutingMode.DIRECT,
    to_account_id="account:external",
    involves_external_account=True,
)


def test_direct_transfer_sets_to_account_only():
    result = build_transfer(_request(), DIRECT, created_by=USER_ID)

    assert result.ok
    assert result.transfer.to_account_id == "account:household_misc"
    assert result.transfer.payment_channel is None
    assert result.transfer.status == TransferStatus.DRAFT
    assert result.transfer.created_by == USER_ID


def test_inter_switch_transfer_uses_channel():
    result = build_transfer(_request(to_account_id="account:savings_main"), INTER_SWITCH, created_by=USER_ID)

    assert result.transfer.to_account_id is None
    assert result.transfer.payment_channel == InterSwitchChannel(to_account="account:savings_main")


def test_inter_switch_record_round_trip():
    """Stored inter-switch records carry the switch channel and no to_account_id key"""
    result = build_transfer(_request(to_account_id="account:savings_main"), INTER_SWITCH, created_by=USER_ID)

    record = json.loads(json.dumps(transfer_record(result.transfer)))

    assert record["payment_channel"]["channel_id"] == "bagayi_inter_switch"
    assert record["payment_channel"]["to_account"] == "account:savings_main"
    assert "to_account_id" not in record


@pytest.mark.parametrize(
    "decision",
    [
        DIRECT,
        INTER_SWITCH,
        RoutingDecision(mode=RoutingMode.MPESA_CHANNEL, action=ChannelAction.BUSINESS_PAYMENT, destination="254700000001"),
        RoutingDecision(mode=RoutingMode.MPESA_CHANNEL, action=ChannelAction.BUSINESS_BUY_GOODS, destination="123456"),
        RoutingDecision(
            mode=RoutingMode.MPESA_CHANNEL,
            action=ChannelAction.BUSINESS_PAY_BILL,
            destination="247247",
            account_reference="ACC-1",
        ),
    ],
)
def test_record_has_exactly_one_destination(decision):
    result = build_transfer(_request(), decision, created_by=USER_ID)
    record = transfer_record(result.transfer)

    assert ("to_account_id" in record) != ("payment_channel" in record)


def test_decision_without_destination_rejected():
    result = build_transfer(_request(), RoutingDecision(mode=RoutingMode.DIRECT), created_by=USER_ID)

    assert result.error.kind == ErrorKind.INVALID_DESTINATION


def test_buy_goods_channel_record():
    decision = RoutingDecision(
        mode=RoutingMode.MPESA_CHANNEL,
        action=ChannelAction.BUSINESS_BUY_GOODS,
        destination="123456",
        payment_integration_id="mpesa:shop_main",
    )
    result = build_transfer(_request(to_account_id=None), decision, created_by=USER_ID)

    assert result.transfer.payment_channel == MpesaBuyGoods(to_account="123456", payment_integration="mpesa:shop_main")
    assert transfer_record(result.transfer)["payment_channel"] == {
        "channel_id": "MPESA",
        "action": "BusinessBuyGoods",
        "to_account": "123456",
        "payment_integration": "mpesa:shop_main",
    }


def test_paybill_channel_record():
    decision = RoutingDecision(
        mode=RoutingMode.MPESA_CHANNEL,
        action=ChannelAction.BUSINESS_PAY_BILL,
        destination="247247",
        account_reference="ACC-1",
    )
    result = build_transfer(_request(to_account_id=None), decision, created_by=USER_ID)

    assert result.transfer.payment_channel == MpesaPayBill(to_account="247247", account_reference="ACC-1")
    assert transfer_record(result.transfer)["payment_channel"]["account_reference"] == "ACC-1"


def test_scenario_d_paybill_without_reference():
    decision = RoutingDecision(
        mode=RoutingMode.MPESA_CHANNEL,
        action=ChannelAction.BUSINESS_PAY_BILL,
        destination="247247",
        account_reference="",
    )
    result = build_transfer(_request(to_account_id=None), decision, created_by=USER_ID)

    assert not result.ok
    assert result.error.kind == ErrorKind.MISSING_CHANNEL_FIELD


def test_linked_inter_switch_requires_external_transaction_id():
    result = build_transfer(_request(to_account_id="account:rent_main"), INTER_SWITCH_LINKED, created_by=USER_ID)

    assert result.error.kind == ErrorKind.MISSING_EXTERNAL_TRANSACTION_ID


def test_linked_inter_switch_with_external_transaction_id():
    request = _request(to_account_id="account:rent_main", external_transaction_id=" QWE123RTY ")
    result = build_transfer(request, INTER_SWITCH_LINKED, created_by=USER_ID)

    assert result.ok
    assert result.transfer.external_transaction_id == "QWE123RTY"
    assert result.transfer.payment_channel.payment_integration == "mpesa:rent_paybill"


def test_scenario_e_external_account_without_transaction_id(directory):
    request = _request(to_account_id="account:external", external_transaction_id="")
    routing = route_transfer(request, directory)

    result = build_transfer(request, routing.decision, created_by=USER_ID)

    assert result.error.kind == ErrorKind.MISSING_EXTERNAL_ACCOUNT_METADATA


def test_external_account_requires_complete_details():
    request = _request(
        to_account_id="account:external",
        external_transaction_id="EXT-1",
        external_account=ExternalAccountDetails(id="0712", name="Equity", type=""),
    )

    assert build_transfer(request, EXTERNAL, created_by=USER_ID).error.kind == ErrorKind.MISSING_EXTERNAL_ACCOUNT_METADATA


def test_external_account_metadata_merged_with_custom_entries():
    request = _request(
        to_account_id="account:external",
        external_transaction_id="EXT-1",
        external_account=ExternalAccountDetails(id=" 0712 ", name="Equity", type="bank"),
        metadata=[
            MetadataEntry(key="invoice", value=" INV-9 "),
            MetadataEntry(key="", value="orphan value"),
            MetadataEntry(key="empty", value="   "),
        ],
    )

    result = build_transfer(request, EXTERNAL, created_by=USER_ID)

    assert result.ok
    assert result.transfer.metadata == {
        "external_account": {"id": "0712", "name": "Equity", "type": "bank"},
        "invoice": "INV-9",
    }
    assert result.transfer.external_transaction_id == "EXT-1"


def test_metadata_omitted_when_all_entries_empty():
    request = _request(metadata=[MetadataEntry(key="", value=""), MetadataEntry(key="note", value="")])

    result = build_transfer(request, DIRECT, created_by=USER_ID)

    assert result.transfer.metadata is None
    assert "metadata" not in transfer_record(result.transfer)


def test_created_at_date_override():
    result = build_transfer(_request(created_at="2024-03-15"), DIRECT, created_by=USER_ID)

    assert result.transfer.created_at == datetime(2024, 3, 15, tzinfo=timezone.utc)
    assert result.warnings == []


def test_created_at_datetime_override_naive_is_utc():
    result = build_transfer(_request(created_at="2024-03-15T08:30:00"), DIRECT, created_by=USER_ID)

    assert result.transfer.created_at == datetime(2024, 3, 15, 8, 30, tzinfo=timezone.utc)


@pytest.mark.parametrize("value", ["not-a-date", "2024-13-45", "yesterday"])
def test_invalid_created_at_ignored_with_warning(value):
    result = build_transfer(_request(created_at=value), DIRECT, created_by=USER_ID)

    assert result.ok
    assert result.transfer.created_at is None
    assert result.warnings == [CREATED_AT_IGNORED]


@pytest.mark.parametrize(
    "requested,expected",
    [
        (None, TransferStatus.DRAFT),
        ("draft", TransferStatus.DRAFT),
        ("submitted", TransferStatus.SUBMITTED),
        ("posted", TransferStatus.DRAFT),
    ],
)
def test_status_defaults_to_draft(requested, expected):
    result = build_transfer(_request(status=requested), DIRECT, created_by=USER_ID)

    assert result.transfer.status == expected


def test_description_and_label_trimmed():
    result = build_transfer(_request(description="  Rent for May ", label="  "), DIRECT, created_by=USER_ID)
    record = transfer_record(result.transfer)

    assert record["description"] == "Rent for May"
    assert "label" not in record


def test_custom_entry_cannot_replace_external_account_details():
    request = _request(
        to_account_id="account:external",
        external_transaction_id="EXT-1",
        external_account=ExternalAccountDetails(id="bank-1", name="KCB", type="bank"),
        metadata=[MetadataEntry(key=" external_account ", value="overwritten"), MetadataEntry(key="note", value="x")],
    )

    result = build_transfer(request, EXTERNAL, created_by=USER_ID)

    assert result.ok
    assert result.transfer.metadata == {
        "external_account": {"id": "bank-1", "name": "KCB", "type": "bank"},
        "note": "x",
    }
