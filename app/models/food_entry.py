"""
Food catalog model
"""

from sqlalchemy import Column, Integer, String

from app.core.db import Base

class FoodEntry(Base):
    __tablename__ = "food_entries"

    id = Column(Integer, primary_key=True, index=True)
    food_text = Column(String(255), unique=True, nullable=False)
    created_at = Column(String(40), nullable=False)
