"""Column types shared by the models and migrations."""

from sqlalchemy import Text, TypeDecorator
from sqlalchemy.dialects.postgresql import CITEXT


class EmailAddress(TypeDecorator):
    """Email column that stores and compares addresses in lowercase.

    On PostgreSQL the column is CITEXT, so the unique index also ignores
    case for rows written outside this app. Elsewhere it is plain text.
    """

    impl = Text
    cache_ok = True

    def load_dialect_impl(self, dialect):
        if dialect.name == "postgresql":
            return dialect.type_descriptor(CITEXT())
        return dialect.type_descriptor(Text())

    def process_bind_param(self, value, dialect):
        # Applies to inserts and to query parameters compared with the column
        return value.strip().lower() if isinstance(value, str) else value
