from sqlalchemy import Column, DateTime, Integer
from sqlalchemy.sql import func

from tasknotes.core.database import Base


class SchemaVersion(Base):
    """One row per applied migration."""

    __tablename__ = "schema_version"

    version = Column(Integer, primary_key=True, autoincrement=False)
    applied_at = Column(DateTime, server_default=func.now())

    def __repr__(self):
        return f"<SchemaVersion(version={self.version}, applied_at={self.applied_at})>"
