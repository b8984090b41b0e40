from sqlalchemy import JSON
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import declarative_base

Base = declarative_base()
metadata = Base.metadata

# JSONB on PostgreSQL, plain JSON elsewhere (test suite runs on SQLite)
JSONType = JSON().with_variant(JSONB(), "postgresql")
