"""
Survey response and self-service token models
"""

from sqlalchemy import Column, Integer, String, ForeignKey
from sqlalchemy.orm import relationship

from app.core.db import Base

class Response(Base):
    __tablename__ = "responses"

    id = Column(Integer, primary_key=True, index=True)
    participant_id = Column(
        Integer,
        ForeignKey("participants.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
    )
    people_count = Column(Integer, nullable=False)
    food_text = Column(String(255), nullable=False)
    created_at = Column(String(40), nullable=False)

    # Relationships
    participant = relationship("Participant", back_populates="response")
    token = relationship(
        "ResponseToken",
        back_populates="response",
        uselist=False,
        cascade="all, delete-orphan",
        passive_deletes=True,
    )


class ResponseToken(Base):
    __tablename__ = "response_tokens"

    response_id = Column(
        Integer,
        ForeignKey("responses.id", ondelete="CASCADE"),
        primary_key=True,
    )
    token = Column(String(128), nullable=False)
    created_at = Column(String(40), nullable=False)

    response = relationship("Response", back_populates="token")
