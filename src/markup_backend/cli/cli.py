import click

from .database import init_db
from .documents import documents
from .users import users

@click.group()
def cli():
    pass

cli.add_command(init_db,"init-db")
cli.add_command(documents,"documents")
cli.add_command(users,"users")

if __name__ == '__main__':
    cli()
