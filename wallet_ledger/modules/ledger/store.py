# -*- coding: utf-8 -*-
"""
wallet_ledger/modules/ledger/store.py

LedgerStore: única fuente de verdad de los saldos.

Garantías:
- Mutaciones de una misma cuenta serializadas por AccountLockRegistry
  (espera acotada -> LockTimeoutError).
- Compare-and-swap sobre accounts.version dentro de la transacción; si
  otro proceso movió la cuenta se relee y reintenta hasta
  cas_max_retries (-> ConcurrencyConflictError).
- Balance + registro del ledger se confirman en la misma transacción de
  BD: o ambos o ninguno (también si la task se cancela).
- Errores transitorios de BD se reintentan con backoff; si persisten,
  StorageUnavailableError.

Autor: WalletLedger
Fecha: 2026-10-19
"""

from __future__ import annotations

import logging
import uuid
from typing import Any, AsyncIterator, Awaitable, Callable, List, Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from wallet_ledger.shared.config import BaseAppSettings, get_settings
from wallet_ledger.shared.core.retry_utils import retry_with_backoff

from .exceptions import (
    AlreadyReversedError,
    ConcurrencyConflictError,
    InsufficientFundsError,
    InvalidAmountError,
    LockTimeoutError,
    StorageUnavailableError,
    TransactionNotFoundError,
)
from .locks import AccountLockRegistry
from .metrics import (
    LEDGER_CAS_CONFLICTS_TOTAL,
    LEDGER_DECLINES_TOTAL,
    LEDGER_LOCK_TIMEOUTS_TOTAL,
    LEDGER_REPLAYS_TOTAL,
    LEDGER_STORAGE_FAILURES_TOTAL,
    LEDGER_WRITES_TOTAL,
)
from .models import Account
from .repositories import AccountRepository, LedgerTransactionRepository
from .schemas import (
    AccountSnapshot,
    ConsistencyReport,
    LedgerWriteResult,
    TransactionRecord,
)

logger = logging.getLogger(__name__)


class _VersionConflict(Exception):
    """El CAS perdió; la transacción se descarta y se relee la cuenta."""


def ensure_positive_amount(amount: Any) -> int:
    """Montos en unidades menores: int estrictamente positivo, sin coerción."""
    if isinstance(amount, bool) or not isinstance(amount, int) or amount <= 0:
        raise InvalidAmountError(amount)
    return amount


class TransactionHistory:
    """
    Historial de una cuenta: perezoso, finito y re-iterable.

    Cada `async for` hace una lectura nueva, paginada por account_version y
    acotada a la versión que tenía la cuenta al empezar esa iteración (no
    es un feed en vivo).
    """

    def __init__(self, store: "LedgerStore", account_id: str, page_size: int) -> None:
        self._store = store
        self.account_id = account_id
        self.page_size = page_size

    def __aiter__(self) -> AsyncIterator[TransactionRecord]:
        return self._iterate()

    async def _iterate(self) -> AsyncIterator[TransactionRecord]:
        snapshot = await self._store.get_account(self.account_id)
        upto_version = snapshot.version
        after_version = 0

        while after_version < upto_version:
            page = await self._store._fetch_page(
                self.account_id,
                after_version=after_version,
                upto_version=upto_version,
                limit=self.page_size,
            )
            if not page:
                break
            for record in page:
                yield record
            after_version = page[-1].account_version

    async def to_list(self) -> List[TransactionRecord]:
        return [record async for record in self]


class LedgerStore:
    """
    Saldos por cuenta con lectura-modificación-escritura atómica y
    registro append-only de transacciones.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        *,
        locks: Optional[AccountLockRegistry] = None,
        lock_timeout_s: float = 5.0,
        cas_max_retries: int = 5,
        storage_max_retries: int = 3,
        retry_base_delay_s: float = 0.05,
        retry_max_delay_s: float = 1.0,
        history_page_size: int = 100,
        account_repo: Optional[AccountRepository] = None,
        tx_repo: Optional[LedgerTransactionRepository] = None,
    ) -> None:
        self._session_factory = session_factory
        self.locks = locks or AccountLockRegistry()
        self.lock_timeout_s = lock_timeout_s
        self.cas_max_retries = cas_max_retries
        self.storage_max_retries = storage_max_retries
        self.retry_base_delay_s = retry_base_delay_s
        self.retry_max_delay_s = retry_max_delay_s
        self.history_page_size = history_page_size
        self.account_repo = account_repo or AccountRepository()
        self.tx_repo = tx_repo or LedgerTransactionRepository()

    @classmethod
    def from_settings(
        cls,
        session_factory: async_sessionmaker[AsyncSession],
        settings: Optional[BaseAppSettings] = None,
        **overrides: Any,
    ) -> "LedgerStore":
        settings = settings or get_settings()
        params: dict[str, Any] = {
            "lock_timeout_s": settings.ledger_lock_timeout_s,
            "cas_max_retries": settings.ledger_cas_max_retries,
            "storage_max_retries": settings.ledger_storage_max_retries,
            "retry_base_delay_s": settings.ledger_retry_base_delay_s,
            "retry_max_delay_s": settings.ledger_retry_max_delay_s,
            "history_page_size": settings.ledger_history_page_size,
        }
        params.update(overrides)
        return cls(session_factory, **params)

    # ---------------------------------------------------------
    # Lecturas
    # ---------------------------------------------------------
    async def get_balance(self, account_id: str) -> int:
        """Balance actual; crea la cuenta con balance 0 si no existe."""
        snapshot = await self.get_account(account_id)
        return snapshot.balance

    async def get_account(self, account_id: str) -> AccountSnapshot:
        return await self._with_storage_retry(self._load_account, account_id)

    async def get_transaction(self, transaction_id: str) -> Optional[TransactionRecord]:
        return await self._with_storage_retry(self._load_transaction, transaction_id)

    async def find_applied_debit(
        self,
        account_id: str,
        order_ref: str,
    ) -> Optional[TransactionRecord]:
        """Débito vigente (applied) registrado para el order_ref, si existe."""
        return await self._with_storage_retry(self._load_applied_debit, account_id, order_ref)

    async def find_reversal(self, transaction_id: str) -> Optional[TransactionRecord]:
        """Registro compensatorio de `transaction_id`, si ya fue revertido."""
        return await self._with_storage_retry(self._load_reversal, transaction_id)

    def list_transactions(self, account_id: str) -> TransactionHistory:
        """Historial cronológico de la cuenta (ver TransactionHistory)."""
        return TransactionHistory(self, account_id, self.history_page_size)

    async def check_consistency(self, account_id: str) -> ConsistencyReport:
        """
        Compara balance vs. suma de amounts del ledger.
        Se toma el lock de la cuenta para no leer a mitad de una mutación.
        """
        await self.get_account(account_id)
        async with self._hold(account_id):
            return await self._with_storage_retry(self._load_consistency, account_id)

    # ---------------------------------------------------------
    # Mutaciones
    # ---------------------------------------------------------
    async def atomic_debit(
        self,
        account_id: str,
        amount: int,
        order_ref: Optional[str] = None,
        *,
        description: Optional[str] = None,
    ) -> LedgerWriteResult:
        """
        Débito atómico.

        Si ya existe un débito applied con el mismo order_ref en la cuenta,
        lo devuelve (replayed=True) sin volver a cobrar.

        Raises:
            InvalidAmountError, InsufficientFundsError (sin cambios de estado),
            LockTimeoutError, ConcurrencyConflictError, StorageUnavailableError
        """
        ensure_positive_amount(amount)
        return await self._mutate(
            account_id,
            self._debit_once,
            amount=amount,
            order_ref=order_ref,
            description=description,
        )

    async def credit(
        self,
        account_id: str,
        amount: int,
        order_ref: Optional[str] = None,
        reverses_transaction_id: Optional[str] = None,
        *,
        description: Optional[str] = None,
    ) -> LedgerWriteResult:
        """
        Abono atómico (sin restricción de saldo).

        Con `reverses_transaction_id`, marcar el original como reversed es
        parte de la misma unidad de trabajo. Sin él, repetir un `order_ref`
        en la misma cuenta devuelve el crédito ya registrado (replayed=True).

        Raises:
            InvalidAmountError, AlreadyReversedError, TransactionNotFoundError,
            LockTimeoutError, ConcurrencyConflictError, StorageUnavailableError
        """
        ensure_positive_amount(amount)
        return await self._mutate(
            account_id,
            self._credit_once,
            amount=amount,
            order_ref=order_ref,
            reverses_transaction_id=reverses_transaction_id,
            description=description,
        )

    # ---------------------------------------------------------
    # Internos: unidad de trabajo
    # ---------------------------------------------------------
    async def _mutate(
        self,
        account_id: str,
        write_once: Callable[..., Awaitable[LedgerWriteResult]],
        **kwargs: Any,
    ) -> LedgerWriteResult:
        async with self._hold(account_id):
            # El id se fija antes del primer intento: si un commit reporta error
            # pero sí se aplicó, el reintento lo encuentra y no vuelve a escribir
            transaction_id = str(uuid.uuid4())
            return await self._with_storage_retry(
                self._write_with_cas, account_id, write_once, transaction_id, **kwargs
            )

    def _hold(self, account_id: str):
        return _CountingLock(self.locks, account_id, self.lock_timeout_s)

    async def _with_storage_retry(self, func: Callable[..., Awaitable[Any]], *args: Any, **kwargs: Any) -> Any:
        try:
            return await retry_with_backoff(
                func,
                *args,
                max_retries=self.storage_max_retries,
                base_delay=self.retry_base_delay_s,
                max_delay=self.retry_max_delay_s,
                **kwargs,
            )
        except SQLAlchemyError as exc:
            LEDGER_STORAGE_FAILURES_TOTAL.inc()
            logger.error("Ledger storage unavailable: %s: %s", type(exc).__name__, exc)
            raise StorageUnavailableError(str(exc)) from exc

    async def _write_with_cas(
        self,
        account_id: str,
        write_once: Callable[..., Awaitable[LedgerWriteResult]],
        transaction_id: str,
        **kwargs: Any,
    ) -> LedgerWriteResult:
        await self._load_account(account_id)

        for attempt in range(1, self.cas_max_retries + 1):
            try:
                async with self._session_factory() as session, session.begin():
                    account = await self.account_repo.get(session, account_id, for_update=True)
                    if account is None:  # pragma: no cover - las cuentas no se borran
                        raise StorageUnavailableError(f"Account {account_id} vanished")

                    landed = await self.tx_repo.get(session, transaction_id)
                    if landed is not None:
                        logger.warning(
                            "Write already committed by a previous attempt: account=%s tx=%s",
                            account_id, transaction_id,
                        )
                        return LedgerWriteResult.from_record(TransactionRecord.from_model(landed))

                    return await write_once(session, account, transaction_id=transaction_id, **kwargs)
            except _VersionConflict:
                LEDGER_CAS_CONFLICTS_TOTAL.inc()
                logger.info(
                    "Version conflict: account=%s attempt=%d/%d",
                    account_id, attempt, self.cas_max_retries,
                )

        raise ConcurrencyConflictError(account_id, self.cas_max_retries)

    async def _debit_once(
        self,
        session: AsyncSession,
        account: Account,
        *,
        transaction_id: str,
        amount: int,
        order_ref: Optional[str],
        description: Optional[str],
    ) -> LedgerWriteResult:
        # Idempotencia dentro de la sección crítica
        if order_ref is not None:
            existing = await self.tx_repo.get_applied_debit_by_order_ref(
                session, account.account_id, order_ref
            )
            if existing is not None:
                LEDGER_REPLAYS_TOTAL.inc()
                logger.info(
                    "Idempotent debit: account=%s ref=%s tx=%s",
                    account.account_id, order_ref, existing.transaction_id,
                )
                return LedgerWriteResult.from_record(
                    TransactionRecord.from_model(existing), replayed=True
                )

        if amount > account.balance:
            LEDGER_DECLINES_TOTAL.inc()
            logger.warning(
                "Insufficient funds: account=%s requested=%d available=%d ref=%s",
                account.account_id, amount, account.balance, order_ref,
            )
            raise InsufficientFundsError(account.account_id, amount, account.balance)

        return await self._apply(
            session,
            account,
            transaction_id=transaction_id,
            delta=-amount,
            order_ref=order_ref,
            description=description,
        )

    async def _credit_once(
        self,
        session: AsyncSession,
        account: Account,
        *,
        transaction_id: str,
        amount: int,
        order_ref: Optional[str],
        reverses_transaction_id: Optional[str],
        description: Optional[str],
    ) -> LedgerWriteResult:
        # Top-ups/ajustes: mismo order_ref en la cuenta -> se devuelve el registrado.
        # Las reversiones quedan cubiertas por mark_reversed.
        if reverses_transaction_id is None and order_ref is not None:
            existing = await self.tx_repo.get_applied_credit_by_order_ref(
                session, account.account_id, order_ref
            )
            if existing is not None:
                LEDGER_REPLAYS_TOTAL.inc()
                logger.info(
                    "Idempotent credit: account=%s ref=%s tx=%s",
                    account.account_id, order_ref, existing.transaction_id,
                )
                return LedgerWriteResult.from_record(
                    TransactionRecord.from_model(existing), replayed=True
                )

        if reverses_transaction_id is not None:
            original = await self.tx_repo.get(session, reverses_transaction_id)
            if original is None or original.account_id != account.account_id:
                raise TransactionNotFoundError(reverses_transaction_id)
            if not await self.tx_repo.mark_reversed(session, reverses_transaction_id):
                raise AlreadyReversedError(reverses_transaction_id)

        return await self._apply(
            session,
            account,
            transaction_id=transaction_id,
            delta=amount,
            order_ref=order_ref,
            reverses_transaction_id=reverses_transaction_id,
            description=description,
        )

    async def _apply(
        self,
        session: AsyncSession,
        account: Account,
        *,
        transaction_id: str,
        delta: int,
        order_ref: Optional[str],
        reverses_transaction_id: Optional[str] = None,
        description: Optional[str] = None,
    ) -> LedgerWriteResult:
        account_id = account.account_id
        seen_version = account.version
        new_balance = account.balance + delta

        swapped = await self.account_repo.compare_and_swap(
            session,
            account_id,
            expected_version=seen_version,
            new_balance=new_balance,
        )
        if not swapped:
            raise _VersionConflict()

        tx = await self.tx_repo.create(
            session,
            transaction_id=transaction_id,
            account_id=account_id,
            account_version=seen_version + 1,
            amount=delta,
            resulting_balance=new_balance,
            order_ref=order_ref,
            reverses_transaction_id=reverses_transaction_id,
            description=description,
        )

        kind = "debit" if delta < 0 else "credit"
        LEDGER_WRITES_TOTAL.labels(kind=kind).inc()
        logger.info(
            "Ledger %s applied: account=%s delta=%+d balance=%d version=%d ref=%s tx=%s",
            kind, account_id, delta, new_balance, seen_version + 1, order_ref, tx.transaction_id,
        )
        return LedgerWriteResult(
            transaction_id=tx.transaction_id,
            account_id=account_id,
            new_balance=new_balance,
        )

    # ---------------------------------------------------------
    # Internos: lecturas (una sesión por intento)
    # ---------------------------------------------------------
    async def _load_account(self, account_id: str) -> AccountSnapshot:
        async with self._session_factory() as session:
            account = await self.account_repo.get(session, account_id)
            if account is not None:
                return AccountSnapshot.from_model(account)

            try:
                account = await self.account_repo.add(session, account_id)
                await session.commit()
                logger.info("Account created: account=%s", account_id)
            except IntegrityError:
                # Concurrencia: otro proceso la creó primero
                await session.rollback()
                account = await self.account_repo.get(session, account_id)
                if account is None:
                    raise
            return AccountSnapshot.from_model(account)

    async def _load_transaction(self, transaction_id: str) -> Optional[TransactionRecord]:
        async with self._session_factory() as session:
            tx = await self.tx_repo.get(session, transaction_id)
            return TransactionRecord.from_model(tx) if tx else None

    async def _load_applied_debit(self, account_id: str, order_ref: str) -> Optional[TransactionRecord]:
        async with self._session_factory() as session:
            tx = await self.tx_repo.get_applied_debit_by_order_ref(session, account_id, order_ref)
            return TransactionRecord.from_model(tx) if tx else None

    async def _load_reversal(self, transaction_id: str) -> Optional[TransactionRecord]:
        async with self._session_factory() as session:
            tx = await self.tx_repo.get_reversal_of(session, transaction_id)
            return TransactionRecord.from_model(tx) if tx else None

    async def _load_consistency(self, account_id: str) -> ConsistencyReport:
        async with self._session_factory() as session, session.begin():
            account = await self.account_repo.get(session, account_id)
            ledger_sum, count = await self.tx_repo.sum_amounts(session, account_id)
            return ConsistencyReport(
                account_id=account_id,
                balance=account.balance if account else 0,
                ledger_sum=ledger_sum,
                transaction_count=count,
            )

    async def _fetch_page(
        self,
        account_id: str,
        *,
        after_version: int,
        upto_version: int,
        limit: int,
    ) -> List[TransactionRecord]:
        async def _read() -> List[TransactionRecord]:
            async with self._session_factory() as session:
                rows = await self.tx_repo.list_page(
                    session,
                    account_id,
                    after_version=after_version,
                    upto_version=upto_version,
                    limit=limit,
                )
                return [TransactionRecord.from_model(row) for row in rows]

        return await self._with_storage_retry(_read)


class _CountingLock:
    """Envuelve AccountLockRegistry.hold para contar los timeouts."""

    def __init__(self, registry: AccountLockRegistry, account_id: str, timeout_s: float) -> None:
        self._cm = registry.hold(account_id, timeout_s)

    async def __aenter__(self) -> None:
        try:
            await self._cm.__aenter__()
        except LockTimeoutError:
            LEDGER_LOCK_TIMEOUTS_TOTAL.inc()
            raise

    async def __aexit__(self, exc_type, exc, tb):
        return await self._cm.__aexit__(exc_type, exc, tb)


__all__ = [
    "LedgerStore",
    "TransactionHistory",
    "ensure_positive_amount",
]
