"""Inbound wallet event ingestion."""

from __future__ import annotations

import logging
from typing import Any, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from wallet_monitor.db.models import utcnow
from wallet_monitor.interfaces.sse.hub import BroadcastHub
from wallet_monitor.modules.accounts.models import Account, Network
from wallet_monitor.modules.accounts.service import AccountService
from wallet_monitor.modules.balances.events import transaction_update_event
from wallet_monitor.modules.balances.models import Direction, NewTransaction
from wallet_monitor.modules.balances.service import BalanceService
from wallet_monitor.modules.notifications.models import WEBHOOK_DEBUG, WEBHOOK_DISCARDED, WEBHOOK_IGNORED
from wallet_monitor.modules.notifications.service import NotificationLogService

from .decoder import decode_envelope
from .exceptions import WebhookPersistenceError
from .extraction import WebhookEvent, extract_event
from .idempotency import derive_transaction_id, is_synthetic
from .models import IngestResult, IngestStage

logger = logging.getLogger(__name__)


class WebhookIngestor:
    """Decode, route and record one inbound event.

    Stages run ``received -> decoded -> account_matched -> recorded ->
    acknowledged``. Handshakes, unroutable events and networks with webhook
    persistence switched off leave early with a 200-class result. Unknown
    prefixes raise ``NetworkNotFoundError``; write failures raise
    ``WebhookPersistenceError``.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        hub: BroadcastHub,
        *,
        log_payloads: bool = True,
    ) -> None:
        self._session_factory = session_factory
        self._hub = hub
        self._log_payloads = log_payloads

    async def ingest(self, prefix: str, body: Any, *, mobile_override: Optional[str] = None) -> IngestResult:
        async with self._session_factory() as session:
            accounts = AccountService.with_session(session)
            network = await accounts.require_network(prefix)
            logger.debug("Webhook %s for %s", IngestStage.RECEIVED.value, prefix)

            payload, decoded = decode_envelope(body)
            if decoded:
                logger.info("Decoded token envelope for %s", prefix)
                await self._audit(session, WEBHOOK_DEBUG, f"Decoded payload for {prefix}", payload)

            if payload.get("server") == "handshake":
                return IngestResult.handshake()

            event = extract_event(payload)
            account, direction = await self._resolve_account(accounts, network, event, mobile_override)
            event.direction = direction
            if account is None:
                logger.info(
                    "Webhook for %s ignored, no account matched (recipient=%s sender=%s mobile=%s)",
                    prefix,
                    event.recipient_mobile,
                    event.sender_mobile,
                    mobile_override or event.generic_mobile,
                )
                await self._audit(session, WEBHOOK_IGNORED, f"No account matched for {prefix}", payload)
                return IngestResult.ignored("Account not found")

            if not network.webhook_enabled:
                logger.info("Webhook for %s discarded, persistence disabled", prefix)
                await self._audit(session, WEBHOOK_DISCARDED, f"Webhook disabled for {prefix}", payload, account.id)
                return IngestResult.discarded()

            transaction_id = derive_transaction_id(payload)
            if is_synthetic(transaction_id):
                logger.warning("Webhook for %s carries no identifying field, using %s", prefix, transaction_id)

            new_transaction = self._build_transaction(transaction_id, account, direction, event, payload)
            try:
                result = await BalanceService.with_session(session).record_transaction(new_transaction)
                await session.commit()
            except SQLAlchemyError as exc:
                await session.rollback()
                logger.exception("Failed to record webhook transaction %s for %s", transaction_id, prefix)
                raise WebhookPersistenceError(str(exc)) from exc

        if not result.created:
            return IngestResult(
                IngestStage.ACKNOWLEDGED,
                message="Transaction already processed",
                transaction=result.transaction,
                duplicate=True,
            )

        logger.info(
            "Recorded %s transaction %s for %s (%d, fee %d)",
            direction.value,
            transaction_id,
            account.name,
            event.amount_minor_units,
            event.fee_minor_units,
        )
        await self._hub.publish(
            account.id,
            transaction_update_event(result.transaction, utcnow(), event.change_minor_units),
        )
        return IngestResult(IngestStage.ACKNOWLEDGED, transaction=result.transaction)

    async def _resolve_account(
        self,
        accounts: AccountService,
        network: Network,
        event: WebhookEvent,
        mobile_override: Optional[str],
    ) -> tuple[Optional[Account], Direction]:
        direction = event.direction
        account = None
        if event.recipient_mobile:
            account = await accounts.find_by_phone(network.id, event.recipient_mobile)
            if account is not None:
                direction = Direction.INCOMING
        if account is None and event.sender_mobile:
            account = await accounts.find_by_phone(network.id, event.sender_mobile)
            if account is not None:
                direction = Direction.OUTGOING
        generic = mobile_override or event.generic_mobile
        if account is None and generic:
            account = await accounts.find_by_phone(network.id, generic)
        if account is None:
            account = await accounts.sole_account(network.id)
            if account is not None:
                logger.info("No mobile match, routing to sole account of %s", network.prefix)

        if event.is_fee_payment:
            direction = Direction.OUTGOING
        return account, direction

    @staticmethod
    def _build_transaction(
        transaction_id: str,
        account: Account,
        direction: Direction,
        event: WebhookEvent,
        payload: dict[str, Any],
    ) -> NewTransaction:
        return NewTransaction(
            transaction_id=transaction_id,
            account_id=account.id,
            amount_minor_units=event.amount_minor_units,
            fee_minor_units=event.fee_minor_units,
            direction=direction,
            status=event.status,
            timestamp=event.timestamp or utcnow(),
            sender_mobile=event.sender_mobile,
            sender_name=event.sender_name,
            recipient_mobile=event.recipient_mobile,
            recipient_name=event.recipient_name,
            raw_payload=payload,
        )

    async def _audit(
        self,
        session: AsyncSession,
        log_type: str,
        message: str,
        payload: dict[str, Any],
        account_id: Optional[str] = None,
    ) -> None:
        if not self._log_payloads:
            return
        await NotificationLogService.with_session(session).create_log(
            type=log_type,
            message=message,
            payload=payload,
            account_id=account_id,
        )
        await session.commit()
