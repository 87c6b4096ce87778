"""SQLAlchemy ORM models."""
import uuid
from datetime import datetime, timezone

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from wallet_monitor.infrastructure.database.base import Base


def generate_uuid() -> str:
    return str(uuid.uuid4())


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Network(Base):
    __tablename__ = "networks"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    name = Column(String(100), nullable=False)
    prefix = Column(String(50), unique=True, nullable=False, index=True)
    is_active = Column(Boolean, nullable=False, default=True)
    realtime_enabled = Column(Boolean, nullable=False, default=True)
    check_interval_ms = Column(Integer)
    webhook_enabled = Column(Boolean, nullable=False, default=True)
    telegram_enabled = Column(Boolean, nullable=False, default=False)
    telegram_bot_token = Column(String(255))
    telegram_chat_id = Column(String(100))
    notify_money_in = Column(Boolean, nullable=False, default=True)
    notify_money_out = Column(Boolean, nullable=False, default=True)
    notify_min_amount = Column(Integer, nullable=False, default=0)  # minor units
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    accounts = relationship("Account", back_populates="network", cascade="all, delete-orphan")


class Account(Base):
    __tablename__ = "accounts"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    network_id = Column(String(36), ForeignKey("networks.id"), nullable=False, index=True)
    name = Column(String(100), nullable=False)
    wallet_endpoint_url = Column(String(500), nullable=False)
    wallet_bearer_token = Column(Text, nullable=False)
    phone_number = Column(String(20), index=True)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    network = relationship("Network", back_populates="accounts")


class BalanceSnapshot(Base):
    __tablename__ = "balance_snapshots"
    __table_args__ = (Index("ix_balance_snapshots_account_checked", "account_id", "checked_at"),)

    id = Column(Integer, primary_key=True, autoincrement=True)
    account_id = Column(String(36), ForeignKey("accounts.id", ondelete="CASCADE"), nullable=False)
    balance_minor_units = Column(Integer, nullable=False)
    mobile_no = Column(String(20))
    source = Column(String(20), nullable=False)  # manual_check, realtime_worker, cron_check, webhook
    wallet_updated_at = Column(DateTime(timezone=True))
    checked_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)


class FinancialTransaction(Base):
    __tablename__ = "financial_transactions"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    transaction_id = Column(String(191), unique=True, nullable=False, index=True)
    account_id = Column(String(36), ForeignKey("accounts.id", ondelete="CASCADE"), nullable=False, index=True)
    amount_minor_units = Column(Integer, nullable=False, default=0)
    fee_minor_units = Column(Integer, nullable=False, default=0)
    direction = Column(String(10), nullable=False)  # incoming, outgoing
    status = Column(String(30), nullable=False, default="SUCCESS")
    sender_mobile = Column(String(20))
    sender_name = Column(String(150))
    recipient_mobile = Column(String(20))
    recipient_name = Column(String(150))
    raw_payload = Column(Text)
    timestamp = Column(DateTime(timezone=True), nullable=False, default=utcnow, index=True)
    created_at = Column(DateTime(timezone=True), default=utcnow)


class NotificationLog(Base):
    __tablename__ = "notification_logs"

    id = Column(Integer, primary_key=True, autoincrement=True)
    type = Column(String(30), nullable=False)
    message = Column(Text)
    payload = Column(Text)
    account_id = Column(String(36), index=True)
    created_at = Column(DateTime(timezone=True), default=utcnow)
