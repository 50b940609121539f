"""
Usage ledger: per-identity monthly counters with rolling-window rollover

Every write is a single SQL statement so concurrent requests for the same
identity never lose updates:
- creation is INSERT ... ON CONFLICT DO NOTHING
- increments are UPDATE ... SET count = count + :amount
- rollover is an UPDATE guarded by the observed window start (compare-and-swap)
"""
from datetime import datetime
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, update
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from typing import Optional
import logging
import uuid

from metering.core.clock import utcnow, usage_window, is_window_expired
from metering.core.formats import OperationCategory
from metering.models.usage_ledger import UsageLedgerEntry
from metering.schemas.tier import Tier
from metering.schemas.usage import CategoryUsage, UsageSummary

logger = logging.getLogger(__name__)

CATEGORY_COLUMNS = {
    OperationCategory.REGULAR: UsageLedgerEntry.regular_monthly_count,
    OperationCategory.RAW: UsageLedgerEntry.raw_monthly_count,
}


def _insert_for(db: AsyncSession):
    """Dialect-specific insert construct supporting ON CONFLICT"""
    if db.get_bind().dialect.name == "postgresql":
        return pg_insert
    return sqlite_insert


def _entry_filter(identity: str, session_id: str):
    return (
        UsageLedgerEntry.identity == identity,
        UsageLedgerEntry.session_id == session_id,
    )


def category_count(entry: UsageLedgerEntry, category: OperationCategory) -> int:
    if category == OperationCategory.RAW:
        return entry.raw_monthly_count
    return entry.regular_monthly_count


class UsageLedgerService:
    """Service for usage ledger reads and writes"""

    @classmethod
    async def ensure_entry(
        cls,
        db: AsyncSession,
        identity: str,
        session_id: str,
        now: Optional[datetime] = None,
    ) -> None:
        """Insert a zeroed entry unless one already exists"""
        now = now or utcnow()
        insert = _insert_for(db)
        stmt = insert(UsageLedgerEntry).values(
            id=str(uuid.uuid4()),
            identity=identity,
            session_id=session_id,
            regular_monthly_count=0,
            raw_monthly_count=0,
            monthly_bandwidth_bytes=0,
            monthly_window_started_at=now,
            created_at=now,
            updated_at=now,
        ).on_conflict_do_nothing(index_elements=["identity", "session_id"])
        await db.execute(stmt)
        await db.commit()

    @classmethod
    async def get_or_create(
        cls,
        db: AsyncSession,
        identity: str,
        session_id: str,
        now: Optional[datetime] = None,
    ) -> UsageLedgerEntry:
        """
        Get the ledger entry for an identity/session, creating it with zeroed
        counters if it does not exist yet

        Args:
            db: Database session
            identity: User id or "anonymous"
            session_id: Session identifier

        Returns:
            UsageLedgerEntry
        """
        await cls.ensure_entry(db, identity, session_id, now=now)

        result = await db.execute(
            select(UsageLedgerEntry).where(*_entry_filter(identity, session_id))
        )
        entry = result.scalar_one()
        await db.refresh(entry)
        return entry

    @classmethod
    async def rollover_if_expired(
        cls,
        db: AsyncSession,
        entry: UsageLedgerEntry,
        now: Optional[datetime] = None,
    ) -> UsageLedgerEntry:
        """
        Reset all counters when the entry's window has expired

        The reset only applies if the window start is still the one observed,
        so two concurrent callers cannot roll the same window over twice.

        Args:
            db: Database session
            entry: Ledger entry to check
            now: Current time (defaults to utcnow)

        Returns:
            The entry, refreshed if a rollover happened
        """
        now = now or utcnow()
        observed_start = entry.monthly_window_started_at

        if not is_window_expired(observed_start, now):
            return entry

        stmt = (
            update(UsageLedgerEntry)
            .where(
                UsageLedgerEntry.id == entry.id,
                UsageLedgerEntry.monthly_window_started_at == observed_start,
            )
            .values(
                regular_monthly_count=0,
                raw_monthly_count=0,
                monthly_bandwidth_bytes=0,
                monthly_window_started_at=now,
                updated_at=now,
            )
            .execution_options(synchronize_session=False)
        )
        result = await db.execute(stmt)
        await db.commit()

        if result.rowcount:
            logger.info(
                f"Usage window rolled over for {entry.identity}/{entry.session_id} "
                f"(previous window started {observed_start.isoformat()})"
            )
        else:
            logger.debug(f"Usage window for {entry.identity}/{entry.session_id} already rolled over")

        await db.refresh(entry)
        return entry

    @classmethod
    async def get_current(
        cls,
        db: AsyncSession,
        identity: str,
        session_id: str,
        now: Optional[datetime] = None,
    ) -> UsageLedgerEntry:
        """Read path for callers: get-or-create, then roll over if expired"""
        now = now or utcnow()
        entry = await cls.get_or_create(db, identity, session_id, now=now)
        return await cls.rollover_if_expired(db, entry, now=now)

    @classmethod
    async def increment(
        cls,
        db: AsyncSession,
        identity: str,
        session_id: str,
        category: OperationCategory,
        amount: int = 1,
        bandwidth_bytes: int = 0,
    ) -> None:
        """
        Atomically add to the counter for a category

        Args:
            db: Database session
            identity: User id or "anonymous"
            session_id: Session identifier
            category: REGULAR or RAW
            amount: Operations to add (>= 0)
            bandwidth_bytes: Bytes to add to the bandwidth counter (>= 0)

        Raises:
            ValueError: On a negative amount or an unknown category
        """
        if category not in CATEGORY_COLUMNS:
            raise ValueError(f"Cannot meter category '{category}'")
        if amount < 0 or bandwidth_bytes < 0:
            raise ValueError("Usage counters can only be incremented")
        if amount == 0 and bandwidth_bytes == 0:
            return

        column = CATEGORY_COLUMNS[category]
        stmt = (
            update(UsageLedgerEntry)
            .where(*_entry_filter(identity, session_id))
            .values({
                column: column + amount,
                UsageLedgerEntry.monthly_bandwidth_bytes: UsageLedgerEntry.monthly_bandwidth_bytes + bandwidth_bytes,
                UsageLedgerEntry.updated_at: utcnow(),
            })
            .execution_options(synchronize_session=False)
        )
        result = await db.execute(stmt)
        await db.commit()

        if not result.rowcount:
            # First write for this identity/session: create the row, then retry once
            await cls.ensure_entry(db, identity, session_id)
            await db.execute(stmt)
            await db.commit()

    @classmethod
    async def record_usage(
        cls,
        db: AsyncSession,
        identity: str,
        session_id: str,
        tier: Tier,
        category: OperationCategory,
        file_size_bytes: int = 0,
    ) -> Optional[UsageLedgerEntry]:
        """
        Commit one successful operation to the ledger according to the tier's
        metering policy

        Unmetered tiers are a no-op and return None.
        """
        if not tier.is_metered:
            logger.debug(f"Tier {tier.id} is unmetered, skipping ledger write for {identity}")
            return None

        entry = await cls.get_current(db, identity, session_id)
        await cls.increment(
            db,
            identity,
            session_id,
            category,
            amount=1,
            bandwidth_bytes=max(0, file_size_bytes),
        )
        await db.refresh(entry)
        return entry

    @classmethod
    async def get_usage_summary(
        cls,
        db: AsyncSession,
        identity: str,
        session_id: str,
        tier: Tier,
    ) -> UsageSummary:
        """
        Get usage statistics for display

        Unmetered tiers report unlimited usage without touching the ledger.
        """
        if not tier.is_metered:
            return UsageSummary(
                tier=tier.id,
                unlimited=True,
                regular=CategoryUsage(used=0),
                raw=CategoryUsage(used=0),
            )

        entry = await cls.get_current(db, identity, session_id)

        def _category(category: OperationCategory) -> CategoryUsage:
            used = category_count(entry, category)
            limit = tier.monthly_limit_for(category)
            return CategoryUsage(used=used, limit=limit, remaining=max(0, limit - used))

        return UsageSummary(
            tier=tier.id,
            unlimited=False,
            regular=_category(OperationCategory.REGULAR),
            raw=_category(OperationCategory.RAW),
            monthly_bandwidth_bytes=entry.monthly_bandwidth_bytes,
            window_started_at=entry.monthly_window_started_at,
            window_resets_at=entry.monthly_window_started_at + usage_window(),
        )
