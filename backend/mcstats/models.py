from sqlalchemy import Column, String, Text
from .database import Base

class PlayerStats(Base):
    __tablename__ = "player_stats"
    uuid = Column(String(36), primary_key=True, index=True)
    # JSON document as written by the game server plugin, sometimes encoded twice
    stats = Column(Text, nullable=True)
