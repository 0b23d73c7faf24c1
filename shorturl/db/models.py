"""
Database Models for URL Shortener Service

This module defines the SQLModel database schemas for:
- ShortURL: Stores the mapping between short codes and original URLs
- Counter: Stores the next counter value used to allocate short codes

Design Decisions:
- Unique indexes on both original_url and short_code: the database, not the
  caller, decides who wins when two requests store the same URL at once
- Counter rows are keyed by name so one database can hold several sequences
"""

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import BigInteger, Column, DateTime, String, Text
from sqlmodel import Field, SQLModel


class ShortURL(SQLModel, table=True):
    """
    Main table storing URL shortening mappings.

    Fields:
    - id: Auto-incrementing primary key (storage bookkeeping only)
    - original_url: The long URL exactly as submitted
    - short_code: Code generated from a counter value
    - created_at: Timestamp when URL was shortened

    Indexes:
    - short_code: Unique index for redirects (most critical path)
    - original_url: Unique index for lookup-or-create
    """
    __tablename__ = "short_urls"

    id: Optional[int] = Field(default=None, primary_key=True)
    original_url: str = Field(
        sa_column=Column(Text, nullable=False, unique=True, index=True)
    )
    short_code: str = Field(
        sa_column=Column(String(16), nullable=False, unique=True, index=True),
        max_length=16
    )
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        sa_column=Column(DateTime(timezone=True), nullable=False)
    )


class Counter(SQLModel, table=True):
    """
    Durable sequence used to allocate short codes.

    `value` is the next number to hand out. It only ever grows, and only
    through CounterStore.next().
    """
    __tablename__ = "counters"

    name: str = Field(sa_column=Column(String(64), primary_key=True))
    value: int = Field(sa_column=Column(BigInteger, nullable=False, default=0))
