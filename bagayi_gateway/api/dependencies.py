"""Dependency injection for FastAPI endpoints"""

from fastapi import Header, HTTPException, Request
from bagayi_gateway.infrastructure.clients.directory import DirectoryClient
from bagayi_gateway.infrastructure.clients.payment_events import PaymentEventsClient


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


def get_current_user_id(x_user_id: str | None = Header(None)) -> str:
    """Acting user's backend record id, resolved upstream by the identity provider"""
    if not x_user_id or not x_user_id.strip():
        raise HTTPException(status_code=401, detail="Unauthorized")
    return x_user_id.strip()


def get_directory_client() -> DirectoryClient:
    """Provide Directory API client instance"""
    return DirectoryClient()


def get_payment_events_client() -> PaymentEventsClient:
    """Provide payment events webhook client instance"""
    return PaymentEventsClient()
