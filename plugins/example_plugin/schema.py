"""Table definitions of the example plugin."""

from sqlalchemy import Column, DateTime, String, Text, func


def example_entities_columns() -> list[Column]:
    """Columns of the ``example_entities`` table."""
    return [
        Column("id", String(64), primary_key=True),
        Column("name", String(255), nullable=False),
        Column("description", Text, nullable=True),
        Column("created_at", DateTime(timezone=True), server_default=func.now(), nullable=False),
    ]
