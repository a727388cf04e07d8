"""
Database table definitions and it stores:
- Attention items (short-term agent memory, grouped by a type key)
Main purpose:
Define persistent data structure.
"""



from sqlalchemy import String, Text, Integer, DateTime, Index
from sqlalchemy.orm import Mapped, mapped_column
from datetime import datetime
from planner.db.base import Base

class AttentionItem(Base):
    __tablename__ = "attention_items"
    id: Mapped[str] = mapped_column(String, primary_key=True)
    type: Mapped[str] = mapped_column(String, index=True)  # e.g. "Current Task Plan for <task>"
    idx: Mapped[int] = mapped_column(Integer)  # 0-based position inside the type
    text: Mapped[str] = mapped_column(Text)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
Index("ix_attention_items_type_idx", AttentionItem.type, AttentionItem.idx)
