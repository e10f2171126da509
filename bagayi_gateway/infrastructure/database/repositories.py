"""Data access layer for transfers"""

import uuid
from typing import List, Optional
from sqlalchemy import or_
from sqlalchemy.orm import Session
from bagayi_gateway.infrastructure.database.models import TransferRecord
from bagayi_gateway.domain.models import PersistedTransfer
from bagayi_gateway.domain.transfers import channel_record


class TransferRepository:
    """Repository for transfers"""

    def __init__(self, db: Session):
        self.db = db

    def create_transfer(self, transfer: PersistedTransfer) -> TransferRecord:
        """Persist a built transfer; created_at falls back to the server clock"""
        db_transfer = TransferRecord(
            from_account_id=transfer.from_account_id,
            to_account_id=transfer.to_account_id,
            payment_channel=channel_record(transfer.payment_channel) if transfer.payment_channel else None,
            amount=transfer.amount,
            type=transfer.type.value,
            status=transfer.status.value,
            routing_mode=transfer.routing_mode.value,
            created_by=transfer.created_by,
            external_transaction_id=transfer.external_transaction_id,
            transfer_metadata=transfer.metadata,
            description=transfer.description,
            label=transfer.label,
        )
        if transfer.created_at is not None:
            db_transfer.created_at = transfer.created_at

        self.db.add(db_transfer)
        self.db.flush()  # Get ID without committing
        return db_transfer

    def get_transfer_by_id(self, transfer_id: uuid.UUID) -> Optional[TransferRecord]:
        return (
            self.db.query(TransferRecord)
            .filter(TransferRecord.id == transfer_id)
            .first()
        )

    def get_transfers_by_account(self, account_id: str, created_by: str, limit: int = 50) -> List[TransferRecord]:
        """Fetch a user's recent transfers into or out of an account"""
        return (
            self.db.query(TransferRecord)
            .filter(TransferRecord.created_by == created_by)
            .filter(or_(TransferRecord.from_account_id == account_id, TransferRecord.to_account_id == account_id))
            .order_by(TransferRecord.created_at.desc())
            .limit(limit)
            .all()
        )

    def get_channel_transfers(self, created_by: str, limit: int = 500) -> List[TransferRecord]:
        """Fetch a user's recent transfers that went out through a payment channel"""
        return (
            self.db.query(TransferRecord)
            .filter(TransferRecord.created_by == created_by)
            .filter(TransferRecord.payment_channel.isnot(None))
            .order_by(TransferRecord.created_at.desc())
            .limit(limit)
            .all()
        )
