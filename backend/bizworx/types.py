from sqlalchemy import Enum as SAEnum
from sqlalchemy.types import TypeDecorator, JSON as SAJSON
from sqlalchemy.dialects.postgresql import JSONB

class JSONBCompat(TypeDecorator):
    """
    Uses PostgreSQL JSONB when available; falls back to generic JSON on other DBs (e.g., SQLite).
    Line items and invoice photos are stored with it; values must be JSON-native
    (money is kept as decimal strings).
    """
    impl = SAJSON
    cache_ok = True

    def load_dialect_impl(self, dialect):
        if dialect.name == "postgresql":
            return dialect.type_descriptor(JSONB())
        return dialect.type_descriptor(SAJSON())


def enum_type(enum_cls, length: int = 32) -> SAEnum:
    """
    Stores the enum's lowercase ``value`` (not its member name) in a VARCHAR
    column so Alembic does not have to manage native PostgreSQL enum types.
    """
    return SAEnum(
        enum_cls,
        values_callable=lambda members: [m.value for m in members],
        native_enum=False,
        validate_strings=True,
        length=length,
    )
