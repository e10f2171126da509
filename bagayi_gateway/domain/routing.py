"""Transfer routing resolver - core business rules for moving money between accounts"""

from decimal import Decimal
from typing import List, Optional, Tuple, Union
from bagayi_gateway.domain.directory import DirectorySnapshot
from bagayi_gateway.domain.exceptions import AccountNotFoundError
from bagayi_gateway.domain.models import (
    Account,
    Category,
    ChannelAction,
    ChannelTarget,
    ErrorKind,
    RoutingDecision,
    RoutingMode,
    RoutingResult,
    TransferError,
    TransferRequest,
)


def _reject(kind: ErrorKind, message: str) -> RoutingResult:
    return RoutingResult(error=TransferError(kind=kind, message=message))


def _is_blank(value: str | None) -> bool:
    return value is None or not value.strip()


def integration_options(category: Category) -> Tuple[str, ...]:
    """Main integration first, then the B2C paybill when the category has one"""
    options = []
    if category.payment_integration_id:
        options.append(category.payment_integration_id)
    if category.has_b2c_paybill and category.b2c_paybill_id:
        options.append(category.b2c_paybill_id)
    return tuple(options)


def _resolve_channel(target: ChannelTarget, source_category: Optional[Category]) -> RoutingResult:
    """Rule 1: explicit M-Pesa destinations always go out through the channel"""
    if _is_blank(target.destination):
        return _reject(ErrorKind.MISSING_CHANNEL_FIELD, f"{target.action.value} requires a destination")

    reference = None
    if target.action == ChannelAction.BUSINESS_PAY_BILL:
        if _is_blank(target.reference):
            return _reject(ErrorKind.MISSING_CHANNEL_FIELD, "Paybill payments require an account reference")
        reference = target.reference.strip()

    integration = source_category.payment_integration_id if source_category is not None else None

    return RoutingResult(
        decision=RoutingDecision(
            mode=RoutingMode.MPESA_CHANNEL,
            action=target.action,
            destination=target.destination.strip(),
            account_reference=reference,
            payment_integration_id=integration,
            # Confirmed later through the M-Pesa callback
            external_transaction_id_required=False,
        )
    )


def resolve(
    source: Account,
    target: Union[Account, ChannelTarget],
    source_category: Optional[Category],
    target_category: Optional[Category],
    directory: DirectorySnapshot,
    amount: Decimal | None = None,
    preferred_integration_id: str | None = None,
) -> RoutingResult:
    """
    Decide how a transfer from `source` to `target` is routed.

    Rules, in priority order:
    1. Channel target (till, paybill + reference, phone) -> MpesaChannel
    2. Account target:
       a. same category -> Direct
       b. either side is the external settlement account -> Direct
       c. source category is linked -> InvalidDestination
       d. otherwise -> InterSwitch, only to a root category's default account;
          external transaction id required when that category is linked

    Category equality is checked before the external-account rule so that
    same-category pairs are never routed through the switch.

    Never raises: every failure comes back as RoutingResult.error.
    """
    if amount is not None and (not amount.is_finite() or amount <= 0):
        return _reject(ErrorKind.NON_POSITIVE_AMOUNT, "Amount must be positive")

    if isinstance(target, ChannelTarget):
        return _resolve_channel(target, source_category)

    if source.id == target.id:
        return _reject(ErrorKind.SAME_ACCOUNT, "From and To accounts must be different")

    involves_external = directory.is_external_account(source.id) or directory.is_external_account(target.id)

    # 2a
    if source.category_id is not None and source.category_id == target.category_id:
        return RoutingResult(
            decision=RoutingDecision(
                mode=RoutingMode.DIRECT,
                to_account_id=target.id,
                involves_external_account=involves_external,
            )
        )

    # 2b
    if involves_external:
        return RoutingResult(
            decision=RoutingDecision(
                mode=RoutingMode.DIRECT,
                to_account_id=target.id,
                involves_external_account=True,
            )
        )

    if target_category is None:
        return _reject(ErrorKind.INVALID_DESTINATION, f"Account {target.id} does not belong to a category")
    if source_category is None:
        return _reject(ErrorKind.INVALID_DESTINATION, f"Account {source.id} does not belong to a category")

    # 2c
    if source_category.is_linked:
        return _reject(
            ErrorKind.INVALID_DESTINATION,
            f"Category {source_category.name} is linked to a payment integration; "
            "transfers out of it must stay within the category or use its M-Pesa channel",
        )

    # 2d
    owner = directory.find_default_account_owner(target.id)
    if owner is None:
        return _reject(
            ErrorKind.INVALID_DESTINATION,
            f"Account {target.id} is not a category default account; cross-category transfers "
            "must target the receiving category's default account",
        )

    required = owner.is_linked
    options: Tuple[str, ...] = ()
    integration = None
    if required:
        options = integration_options(owner)
        if preferred_integration_id and preferred_integration_id in options:
            integration = preferred_integration_id
        elif options:
            integration = options[0]

    return RoutingResult(
        decision=RoutingDecision(
            mode=RoutingMode.INTER_SWITCH,
            to_account_id=owner.default_account_id,
            payment_integration_id=integration,
            payment_integration_options=options,
            external_transaction_id_required=required,
        )
    )


def _require_account(directory: DirectorySnapshot, account_id: str) -> Account:
    account = directory.get_account(account_id)
    if account is None:
        raise AccountNotFoundError(account_id)
    return account


def route_transfer(request: TransferRequest, directory: DirectorySnapshot) -> RoutingResult:
    """
    Main entry point: look up the request's accounts and resolve its routing.

    Raises:
        AccountNotFoundError: from or to account id is unknown to the directory
    """
    has_account = not _is_blank(request.to_account_id)
    has_channel = request.channel_target is not None
    if has_account == has_channel:
        return _reject(
            ErrorKind.INVALID_DESTINATION,
            "Exactly one of a destination account or a payment channel is required",
        )

    source = _require_account(directory, request.from_account_id)
    source_category = directory.get_category(source.category_id)

    if has_channel:
        target: Union[Account, ChannelTarget] = request.channel_target
        target_category = None
    else:
        target = _require_account(directory, request.to_account_id)
        target_category = directory.get_category(target.category_id)

    return resolve(
        source,
        target,
        source_category,
        target_category,
        directory,
        amount=request.amount,
        preferred_integration_id=request.payment_integration_id,
    )


def destination_choices(source: Account, directory: DirectorySnapshot) -> List[Account]:
    """Accounts the resolver accepts as destinations for `source`, for UI pickers"""
    source_category = directory.get_category(source.category_id)
    choices = []
    for candidate in directory.accounts.values():
        result = resolve(
            source,
            candidate,
            source_category,
            directory.get_category(candidate.category_id),
            directory,
        )
        if result.ok:
            choices.append(candidate)
    return choices
