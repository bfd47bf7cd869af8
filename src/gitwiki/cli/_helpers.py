"""Shared helpers, option decorators, and the main CLI group."""

from __future__ import annotations

import json

import click

from ..config import StoreConfig
from ..exceptions import GitWikiError, InvalidPathError
from ..history import Revision
from ..paths import clean
from ..repo import Repository


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _strip_colon(raw: str) -> str:
    """Strip an optional leading ':' from a repo-side path."""
    return raw[1:] if raw.startswith(":") else raw


def _clean_repo_path(raw: str | None) -> str:
    """Normalize and validate a repo-side path, ``""`` for the root."""
    try:
        return clean(_strip_colon(raw or ""))
    except InvalidPathError as exc:
        raise click.ClickException(str(exc))


def _status(ctx, msg):
    """Emit a status message to stderr when verbose mode (-v) is on."""
    if ctx.obj.get("verbose"):
        click.echo(msg, err=True)


def _store_repo(ctx, param, value):
    """Click callback: store --repo value in the context."""
    ctx.ensure_object(dict)
    if value is not None:
        ctx.obj["repo_path"] = value
    return value


def _repo_option(f):
    """Shared --repo/-r option decorator for all commands."""
    return click.option(
        "--repo", "-r", type=click.Path(), envvar="GITWIKI_REPO",
        help="Path to bare git repository (or set GITWIKI_REPO).",
        expose_value=False, callback=_store_repo, is_eager=True,
    )(f)


def _revision_option(f):
    """Shared --rev option: pin a historical revision."""
    return click.option(
        "--rev", "revision", default=None,
        help="Revision id (full or abbreviated sha) instead of the branch tip.",
    )(f)


def _format_option(f):
    return click.option(
        "--format", "fmt", type=click.Choice(["text", "json"]), default="text",
        help="Output format.",
    )(f)


def _require_repo(ctx) -> str:
    """Get the repo path from context, raising a clear error if missing."""
    repo = ctx.obj.get("repo_path")
    if not repo:
        raise click.ClickException(
            "No repository specified. Use --repo or set GITWIKI_REPO."
        )
    return repo


def _open_repo(ctx) -> Repository:
    repo_path = _require_repo(ctx)
    config = None
    if ctx.obj.get("branch"):
        config = StoreConfig.from_env(branch=ctx.obj["branch"])
    try:
        return Repository.open(repo_path, create=False, config=config)
    except FileNotFoundError as exc:
        raise click.ClickException(str(exc))


def _revision_dict(rev: Revision) -> dict:
    return {
        "id": rev.id,
        "author": rev.author,
        "email": rev.email,
        "time": rev.time.isoformat(),
        "message": rev.message,
    }


def _echo_json(data) -> None:
    click.echo(json.dumps(data, indent=2))


class _WikiErrors:
    """Context manager turning library errors into click errors."""

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        if exc is not None and isinstance(exc, GitWikiError):
            raise click.ClickException(str(exc)) from exc
        return False


# ---------------------------------------------------------------------------
# Main group
# ---------------------------------------------------------------------------

@click.group()
@click.option("--repo", "-r", type=click.Path(), envvar="GITWIKI_REPO",
              help="Path to bare git repository (or set GITWIKI_REPO).",
              expose_value=False, callback=_store_repo, is_eager=True)
@click.option("--branch", "-b", default=None, envvar="GITWIKI_BRANCH",
              help="Branch holding the wiki (default: the repository's HEAD).")
@click.option("-v", "--verbose", is_flag=True, help="Verbose output on stderr.")
@click.pass_context
def main(ctx, branch, verbose):
    """gitwiki: a versioned document store on a bare git repository.

    \b
    Quick start:
      gitwiki init -r wiki.git
      gitwiki write :Home "Hello" -m init
      gitwiki show :Home
      gitwiki ls

    \b
    Repo paths may be prefixed with ':' (e.g. :path/to/page).
    Set GITWIKI_REPO to avoid passing --repo on every call.
    """
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["branch"] = branch
