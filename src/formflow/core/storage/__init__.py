"""Reference Repository on SQLAlchemy Core."""

from formflow.core.storage.repository import SqlRepository
from formflow.core.storage.schema import entries_table, entry_data_table, metadata

__all__ = ["SqlRepository", "entries_table", "entry_data_table", "metadata"]
