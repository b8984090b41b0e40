import click
from markup_backend.database import get_engine
from markup_backend.model import Base

@click.command()
def init_db():
    """Create all tables on the configured database (use alembic in production)."""
    Base.metadata.create_all(get_engine())
    click.echo("Tables created")
