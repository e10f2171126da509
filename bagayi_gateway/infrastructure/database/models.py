"""SQLAlchemy ORM models for persisted transfers"""

import uuid
from sqlalchemy import Column, DateTime, Numeric, Text, JSON, Uuid
from sqlalchemy.orm import declarative_base
from sqlalchemy.sql import func

Base = declarative_base()


class TransferRecord(Base):
    """Transfer between ledger accounts or out through a payment channel"""

    __tablename__ = "transfer"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    from_account_id = Column(Text, nullable=False, index=True)
    # Exactly one of to_account_id / payment_channel is set
    to_account_id = Column(Text, nullable=True, index=True)
    payment_channel = Column(JSON(none_as_null=True), nullable=True)
    amount = Column(Numeric(18, 2), nullable=False)
    type = Column(Text, nullable=False)
    status = Column(Text, nullable=False, default="draft")
    routing_mode = Column(Text, nullable=False)
    created_by = Column(Text, nullable=False, index=True)
    external_transaction_id = Column(Text, nullable=True)
    transfer_metadata = Column("metadata", JSON(none_as_null=True), nullable=True)
    description = Column(Text, nullable=True)
    label = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=True, onupdate=func.now())
