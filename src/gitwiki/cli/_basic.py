"""Basic commands: init, show, ls, info, log, write, diff."""

from __future__ import annotations

import os

import click

from ..config import StoreConfig
from ..finder import find_directory_or_fail, find_document_or_fail, find_or_fail, new_document
from ..repo import Repository
from ._helpers import (
    main,
    _WikiErrors,
    _clean_repo_path,
    _echo_json,
    _format_option,
    _open_repo,
    _repo_option,
    _require_repo,
    _revision_dict,
    _revision_option,
    _status,
)


# ---------------------------------------------------------------------------
# init
# ---------------------------------------------------------------------------

@main.command()
@_repo_option
@click.pass_context
def init(ctx):
    """Create a new, empty bare git repository."""
    repo_path = _require_repo(ctx)
    if os.path.exists(repo_path):
        raise click.ClickException(f"Repository already exists: {repo_path}")
    config = StoreConfig.from_env(branch=ctx.obj.get("branch"))
    Repository.open(repo_path, config=config).close()
    _status(ctx, f"Initialized {repo_path}")


# ---------------------------------------------------------------------------
# show
# ---------------------------------------------------------------------------

@main.command()
@_repo_option
@click.argument("path")
@_revision_option
@click.pass_context
def show(ctx, path, revision):
    """Print the content of the document at PATH."""
    path = _clean_repo_path(path)
    with _open_repo(ctx) as repo, _WikiErrors():
        doc = find_document_or_fail(repo, path, revision)
        click.get_binary_stream("stdout").write(doc.content)


# ---------------------------------------------------------------------------
# ls
# ---------------------------------------------------------------------------

@main.command()
@_repo_option
@click.argument("path", required=False, default="")
@_revision_option
@_format_option
@click.pass_context
def ls(ctx, path, revision, fmt):
    """List the directory at PATH (default: root), directories first."""
    path = _clean_repo_path(path)
    with _open_repo(ctx) as repo, _WikiErrors():
        directory = find_directory_or_fail(repo, path, revision)
        children = directory.all_children()
        if fmt == "json":
            _echo_json([
                {"name": c.name, "path": c.path, "kind": c.kind.value, "hash": c.identity}
                for c in children
            ])
        else:
            for child in children:
                click.echo(child.name + "/" if child.is_directory else child.name)


# ---------------------------------------------------------------------------
# info
# ---------------------------------------------------------------------------

@main.command()
@_repo_option
@click.argument("path", required=False, default="")
@_revision_option
@_format_option
@click.pass_context
def info(ctx, path, revision, fmt):
    """Show what PATH is and where it sits in its history."""
    path = _clean_repo_path(path)
    with _open_repo(ctx) as repo, _WikiErrors():
        node = find_or_fail(repo, path, revision)
        data = {
            "path": node.path,
            "name": node.display_name,
            "kind": node.kind.value,
            "hash": node.identity,
            "current": node.is_current,
        }
        if node.is_document:
            data["mime"] = str(node.mime_type)
            data["size"] = len(node.content)
        for key, rev in (("revision", node.revision),
                         ("latest", node.latest_revision),
                         ("previous", node.previous_revision),
                         ("next", node.next_revision)):
            data[key] = rev.id if rev else None
        if fmt == "json":
            _echo_json(data)
        else:
            for key, value in data.items():
                click.echo(f"{key}: {'' if value is None else value}")


# ---------------------------------------------------------------------------
# log
# ---------------------------------------------------------------------------

@main.command()
@_repo_option
@click.argument("path", required=False, default="")
@_format_option
@click.pass_context
def log(ctx, path, fmt):
    """Show the revisions that changed PATH, most recent first."""
    path = _clean_repo_path(path)
    with _open_repo(ctx) as repo, _WikiErrors():
        node = find_or_fail(repo, path)
        entries = node.history()
        if fmt == "json":
            _echo_json([_revision_dict(e) for e in entries])
        else:
            for entry in entries:
                click.echo(f"{entry.short_id}  {entry.time.isoformat()}  {entry.author}  {entry.message}")


# ---------------------------------------------------------------------------
# write
# ---------------------------------------------------------------------------

@main.command()
@_repo_option
@click.argument("path")
@click.argument("content", required=False, default=None)
@click.option("-m", "--message", default="", help="Commit message.")
@click.option("--author", default=None, help='Author ("Name" or "Name <email>").')
@click.option("--new", "require_new", is_flag=True, help="Fail if PATH already exists.")
@click.pass_context
def write(ctx, path, content, message, author, require_new):
    """Write CONTENT (or stdin) to the document at PATH and commit it."""
    path = _clean_repo_path(path)
    if not path:
        raise click.ClickException("Cannot write to the root")
    data = content.encode() if content is not None else click.get_binary_stream("stdin").read()
    with _open_repo(ctx) as repo, _WikiErrors():
        doc = new_document(repo, path)
        if require_new and not doc.is_new:
            raise click.ClickException(f"Object already exists: {path!r}")
        rev = doc.write(data, message, author)
        if rev is None:
            _status(ctx, f"{path}: unchanged")
        else:
            _status(ctx, f"{path}: committed {rev.short_id}")


# ---------------------------------------------------------------------------
# diff
# ---------------------------------------------------------------------------

@main.command()
@_repo_option
@click.argument("path", required=False, default="")
@click.option("--from", "from_rev", default=None,
              help="Old revision (default: the revision before the latest).")
@click.option("--to", "to_rev", default=None, help="New revision (default: the latest).")
@click.option("--stat", is_flag=True, help="List changed paths only.")
@click.pass_context
def diff(ctx, path, from_rev, to_rev, stat):
    """Show changes to PATH between two revisions."""
    path = _clean_repo_path(path)
    with _open_repo(ctx) as repo, _WikiErrors():
        node = find_or_fail(repo, path)
        to_rev = to_rev or node.latest_revision
        if from_rev is None:
            from_rev = node.previous_revision
            if from_rev is None:
                raise click.ClickException(f"{path or '/'} has only one revision")
        result = node.diff(from_rev, to_rev)
        if stat:
            for change in result:
                click.echo(f"{change.kind[0].upper()}  {change.path}")
        else:
            click.echo(result.patch, nl=False)
