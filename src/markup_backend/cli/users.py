import click
from sqlalchemy import or_
from markup_backend.database import get_db
from markup_backend.interface.tokens import encrypt_api_key
from markup_backend.model.auth import User

@click.command()
@click.option("--user", "-u", "user", required=True, help="User id, username or email")
@click.option("--password", "-p", "password", prompt=True, hide_input=True, confirmation_prompt=True)
def set_password(user, password):

    if len(password) < 12:
        raise click.ClickException("Password must be at least 12 characters")

    db = next(get_db())
    try:
        db_user = db.query(User).filter(or_(User.id == user, User.username == user, User.email == user)).first()

        if db_user is None:
            raise click.ClickException(f"Unknown user: {user}")

        db_user.password = encrypt_api_key(password)
        db.commit()
    finally:
        db.close()

    click.echo(f"Password updated for {user}")

@click.group()
def users():
    pass

users.add_command(set_password,"set-password")
