"""
Key/value survey settings model
"""

from sqlalchemy import Column, String, Text

from app.core.db import Base

class SettingEntry(Base):
    __tablename__ = "settings"

    key = Column(String(64), primary_key=True)
    value = Column(Text, nullable=False)
