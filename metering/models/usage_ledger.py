"""
Usage ledger model
"""
from sqlalchemy import Column, String, Integer, BigInteger, DateTime, UniqueConstraint, CheckConstraint
import uuid

from metering.core.clock import utcnow
from metering.db.base import Base


class UsageLedgerEntry(Base):
    """
    Monthly usage counters for one (identity, session) pair

    Counters only grow, except when a window rollover resets them to zero.
    """
    __tablename__ = "usage_ledger"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))

    # User id, or "anonymous" for anonymous sessions
    identity = Column(String(64), nullable=False, index=True)
    session_id = Column(String(128), nullable=False)

    # Counters for the current window
    regular_monthly_count = Column(Integer, default=0, nullable=False)
    raw_monthly_count = Column(Integer, default=0, nullable=False)
    monthly_bandwidth_bytes = Column(BigInteger, default=0, nullable=False)

    monthly_window_started_at = Column(DateTime, default=utcnow, nullable=False)

    # Timestamps
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, nullable=False)

    __table_args__ = (
        UniqueConstraint("identity", "session_id", name="uq_usage_ledger_identity_session"),
        CheckConstraint("regular_monthly_count >= 0", name="ck_usage_ledger_regular_non_negative"),
        CheckConstraint("raw_monthly_count >= 0", name="ck_usage_ledger_raw_non_negative"),
        CheckConstraint("monthly_bandwidth_bytes >= 0", name="ck_usage_ledger_bandwidth_non_negative"),
    )

    def __repr__(self):
        return (
            f"<UsageLedgerEntry(identity={self.identity}, session_id={self.session_id}, "
            f"regular={self.regular_monthly_count}, raw={self.raw_monthly_count})>"
        )
