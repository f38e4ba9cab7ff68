# src/formflow/core/storage/schema.py
"""SQLAlchemy table definitions for entry storage.

Uses SQLAlchemy Core (not ORM). One row in ``entries`` per successful
submission, one row in ``entry_data`` per stored field value.
"""

from sqlalchemy import (
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    MetaData,
    PrimaryKeyConstraint,
    String,
    Table,
    Text,
)

# Shared metadata for the formflow-owned tables
metadata = MetaData()

entries_table = Table(
    "entries",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("form_id", Integer, nullable=False),
    Column("ip", String(45), nullable=False, default=""),
    Column("form_url", String(512), nullable=False, default=""),
    Column("referring_url", String(512), nullable=False, default=""),
    Column("post_id", Integer),
    Column("created_by", Integer),
    Column("created_at", DateTime(timezone=True), nullable=False),
    Column("updated_at", DateTime(timezone=True), nullable=False),
    Index("ix_entries_form_created_by", "form_id", "created_by"),
    Index("ix_entries_form_ip", "form_id", "ip"),
)

entry_data_table = Table(
    "entry_data",
    metadata,
    Column("entry_id", Integer, ForeignKey("entries.id", ondelete="CASCADE"), nullable=False),
    Column("element_id", Integer, nullable=False),
    Column("value", Text, nullable=False),
    PrimaryKeyConstraint("entry_id", "element_id"),
)
