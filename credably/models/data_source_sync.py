"""
DataSourceSync Model - per (user, source) refresh status flag

One row per user per data source (github, twitter, instagram, youtube,
education, certifications). The row is overwritten on every sync attempt;
it records the latest outcome only, not a history.
"""

from sqlalchemy import Column, Integer, String, DateTime, Text, ForeignKey, UniqueConstraint
from datetime import datetime
from credably.database import Base


SYNC_STATUSES = ("idle", "syncing", "completed", "failed")


class DataSourceSync(Base):
    __tablename__ = "data_source_syncs"
    __table_args__ = (
        UniqueConstraint("user_id", "source", name="uq_data_source_sync_user_source"),
    )

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(String(64), ForeignKey("users.id"), nullable=False, index=True)
    source = Column(String(50), nullable=False)
    status = Column(String(20), nullable=False, default="idle")
    sync_frequency = Column(String(20), default="daily")
    last_sync_at = Column(DateTime, nullable=True)
    next_sync_at = Column(DateTime, nullable=True)
    error = Column(Text, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def to_dict(self):
        return {
            "source": self.source,
            "status": self.status,
            "syncFrequency": self.sync_frequency,
            "lastSyncAt": self.last_sync_at.isoformat() if self.last_sync_at else None,
            "nextSyncAt": self.next_sync_at.isoformat() if self.next_sync_at else None,
            "error": self.error,
        }
