from sqlalchemy import Column, Integer, String, DateTime
from .base import Base
from datetime import datetime


class Recording(Base):
    __tablename__ = "recordings"
    # AUTOINCREMENT so ids of deleted rows are never handed out again
    __table_args__ = {"sqlite_autoincrement": True}

    id = Column(Integer, primary_key=True, index=True)
    filename = Column(String, nullable=False)
    filepath = Column(String, nullable=False)
    filesize = Column(Integer, nullable=False)
    # store-local time, column name kept as createdAt
    created_at = Column("createdAt", DateTime, default=datetime.now, index=True)
