"""Domain-specific exceptions

Routing and build failures are returned as TransferError values; these exceptions
cover lookups and collaborators that cannot produce a result at all.
"""


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class DirectoryAPIError(DomainException):
    """Directory service returned an error or is unavailable"""

    pass


class AccountNotFoundError(DomainException):
    """Account id is not present in the directory snapshot"""

    def __init__(self, account_id: str):
        super().__init__(f"Account not found: {account_id}")
        self.account_id = account_id
