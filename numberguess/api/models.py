"""
SQLAlchemy models for player accounts and the game's key-value records.
"""

from datetime import datetime
from sqlalchemy import Column, String, DateTime, Text

from .database import Base


class Player(Base):
    __tablename__ = "players"

    id = Column(String(36), primary_key=True)  # uuid
    username = Column(String(64), unique=True, nullable=False, index=True)  # doubles as the game identity
    password_hash = Column(String(255), nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)


class StateItem(Base):
    """One stored record per key ("admin", "game_state", "contract_info")."""
    __tablename__ = "state_items"

    key = Column(String(64), primary_key=True)
    value = Column(Text, nullable=False)  # JSON
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
