"""
Guest list model
"""

from sqlalchemy import Column, Integer, String

from app.core.db import Base

class GuestListEntry(Base):
    __tablename__ = "guest_list"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    created_at = Column(String(40), nullable=False)
