import click
from sqlalchemy import or_
from markup_backend.database import get_db
from markup_backend.interface.markup_documents import DocumentLocation, MarkupDocumentGet
from markup_backend.model.auth import User
from markup_backend.permissions.auth import AuthenticationResult, PrincipalBuilder
from markup_backend.permissions.core import decide
from markup_backend.permissions.decisions import Action, Allow
from markup_backend.model.markup import MarkupDocument
from markup_backend.repositories.base import RepositoryError
from markup_backend.repositories.markup_document import MarkupDocumentRepository


def list_documents(db, user: str, location: str | None = None, search: str | None = None,
                   include_deleted: bool = False, limit: int | None = None):
    """List documents as seen by `user` (id, username or email).

    This is the only path that can include soft-deleted documents and it is
    restricted to administrators by the same rules as the HTTP API.
    """
    db_user = db.query(User).filter(or_(User.id == user, User.username == user, User.email == user)).first()

    if db_user is None:
        raise click.ClickException(f"Unknown user: {user}")

    principal = PrincipalBuilder.build(AuthenticationResult(db_user.id, db_user.email, "cli"), db)

    decision = decide(principal, MarkupDocument, Action.LIST, location=location, include_deleted=include_deleted)

    if not isinstance(decision, Allow):
        raise click.ClickException(f"Access denied for {user}")

    try:
        items, total = MarkupDocumentRepository(db).list(decision.predicate, search=search, limit=limit)
    except RepositoryError as e:
        raise click.ClickException(str(e))

    return [MarkupDocumentGet.model_validate(item, from_attributes=True) for item in items], total


@click.command("list")
@click.option("--user", "-u", "user", required=True, help="User id, username or email to list as")
@click.option("--location", type=click.Choice([l.value for l in DocumentLocation]), default=None)
@click.option("--search", "-s", default=None, help="Case-insensitive title filter")
@click.option("--include-deleted", is_flag=True, default=False, help="Include soft-deleted documents (admins only)")
@click.option("--limit", "-n", type=int, default=None)
def list_command(user, location, search, include_deleted, limit):

    db = next(get_db())
    try:
        items, total = list_documents(db, user, location, search, include_deleted, limit)
    finally:
        db.close()

    for item in items:
        deleted = " [deleted]" if item.is_deleted else ""
        click.echo(f"{item.id}  {item.location.value:<8}  {item.title}  ({item.created_by_name}){deleted}")

    click.echo(f"{len(items)} of {total} documents")


@click.group()
def documents():
    pass

documents.add_command(list_command,"list")
