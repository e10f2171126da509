"""Directory API HTTP client for fetching a user's accounts and categories"""

import httpx
from typing import Any, Dict
from bagayi_gateway.domain.directory import DirectorySnapshot
from bagayi_gateway.domain.models import Account, Category
from bagayi_gateway.domain.exceptions import DirectoryAPIError
from bagayi_gateway.config import settings


def parse_snapshot(data: Dict[str, Any], external_account_id: str | None = None) -> DirectorySnapshot:
    """
    Build a DirectorySnapshot from the directory service payload.

    The payload's external_account_id wins over the configured one.

    Raises:
        KeyError, TypeError: On malformed account or category entries
    """
    accounts = [
        Account(
            id=acc["id"],
            name=acc.get("name") or acc["id"],
            category_id=acc.get("category_id"),
        )
        for acc in data.get("accounts", [])
    ]
    categories = [
        Category(
            id=cat["id"],
            name=cat.get("name") or cat["id"],
            parent_id=cat.get("parent_id"),
            is_linked=bool(cat.get("is_linked", False)),
            default_account_id=cat.get("default_account_id"),
            payment_integration_id=cat.get("payment_integration_id"),
            has_b2c_paybill=bool(cat.get("has_b2c_paybill", False)),
            b2c_paybill_id=cat.get("b2c_paybill_id"),
        )
        for cat in data.get("categories", [])
    ]
    return DirectorySnapshot.build(
        accounts,
        categories,
        external_account_id=data.get("external_account_id") or external_account_id,
    )


class DirectoryClient:
    """Client for the budget service's account/category directory"""

    def __init__(self, base_url: str | None = None, timeout: float | None = None):
        self.base_url = base_url or settings.directory_api_base
        self.timeout = timeout or settings.http_timeout_seconds

    async def get_snapshot(self, user_id: str) -> DirectorySnapshot:
        """
        Fetch the accounts and categories visible to a user.

        Raises:
            DirectoryAPIError: On timeout, HTTP errors, or invalid response
        """
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            try:
                response = await client.get(
                    f"{self.base_url}/directory",
                    params={"user_id": user_id},
                )
                response.raise_for_status()
                return parse_snapshot(response.json(), external_account_id=settings.external_account_id)

            except httpx.TimeoutException as e:
                raise DirectoryAPIError(f"Directory API timeout after {self.timeout}s") from e
            except httpx.HTTPStatusError as e:
                raise DirectoryAPIError(f"Directory API error: {e.response.status_code}") from e
            except httpx.RequestError as e:
                raise DirectoryAPIError(f"Directory API unreachable: {e}") from e
            except (KeyError, ValueError, TypeError) as e:
                raise DirectoryAPIError(f"Invalid directory data: {e}") from e
