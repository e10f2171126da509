"""Account/category directory snapshot consumed by the routing resolver"""

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional
from bagayi_gateway.domain.models import Account, Category

EXTERNAL_ACCOUNT_NAME = "External"


@dataclass
class DirectorySnapshot:
    """
    Read-only view of a user's accounts and categories.

    Fetched once per request and passed explicitly, so every routing decision
    in that request is made against the same category linkage flags.
    """

    accounts: Dict[str, Account] = field(default_factory=dict)
    categories: Dict[str, Category] = field(default_factory=dict)
    external_account_id: Optional[str] = None

    @classmethod
    def build(
        cls,
        accounts: Iterable[Account],
        categories: Iterable[Category],
        external_account_id: str | None = None,
    ) -> "DirectorySnapshot":
        account_map = {account.id: account for account in accounts}
        category_map = {category.id: category for category in categories}

        # The settlement account lives outside the category tree
        if external_account_id and external_account_id not in account_map:
            account_map[external_account_id] = Account(
                id=external_account_id,
                name=EXTERNAL_ACCOUNT_NAME,
                category_id=None,
            )

        return cls(accounts=account_map, categories=category_map, external_account_id=external_account_id)

    def get_account(self, account_id: str) -> Optional[Account]:
        return self.accounts.get(account_id)

    def get_category(self, category_id: str | None) -> Optional[Category]:
        if category_id is None:
            return None
        return self.categories.get(category_id)

    def list_accounts_in_category(self, category_id: str) -> List[Account]:
        return [account for account in self.accounts.values() if account.category_id == category_id]

    def is_external_account(self, account_id: str) -> bool:
        return bool(self.external_account_id) and account_id == self.external_account_id

    def root_of(self, category_id: str | None) -> Optional[Category]:
        """Walk parent links up to the root category (None on a broken or cyclic chain)"""
        seen = set()
        category = self.get_category(category_id)
        while category is not None and not category.is_root:
            if category.id in seen:
                return None
            seen.add(category.id)
            category = self.get_category(category.parent_id)
        return category

    def find_default_account_owner(self, account_id: str) -> Optional[Category]:
        """
        Reverse lookup: which root category treats this account as its default.

        A designation only counts when the account belongs to that root category
        or one of its descendants.
        """
        account = self.get_account(account_id)
        if account is None or account.category_id is None:
            return None

        root = self.root_of(account.category_id)
        if root is None or root.default_account_id != account_id:
            return None
        return root

    def default_accounts(self) -> List[Account]:
        """Accounts that stand in for their root category in inter-switch transfers"""
        defaults = []
        for category in self.categories.values():
            if not category.is_root or not category.default_account_id:
                continue
            if self.find_default_account_owner(category.default_account_id) == category:
                defaults.append(self.accounts[category.default_account_id])
        return defaults
