"""
Participant model
"""

from sqlalchemy import Column, Integer, String
from sqlalchemy.orm import relationship

from app.core.db import Base

class Participant(Base):
    __tablename__ = "participants"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    selected_at = Column(String(40), nullable=False)

    # Relationships
    response = relationship("Response", back_populates="participant", uselist=False)
