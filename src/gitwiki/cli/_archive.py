"""Archive command: export a directory as a gzipped tarball."""

from __future__ import annotations

import click

from ..finder import find_directory_or_fail
from ._helpers import (
    main,
    _WikiErrors,
    _clean_repo_path,
    _open_repo,
    _repo_option,
    _revision_option,
    _status,
)


@main.command()
@_repo_option
@click.argument("path", required=False, default="")
@_revision_option
@click.option("--dest", "-d", type=click.Path(file_okay=False, exists=True), default=".",
              help="Directory to write <name>.tar.gz into (default: current directory).")
@click.pass_context
def archive(ctx, path, revision, dest):
    """Export the directory at PATH (default: root) as <name>.tar.gz."""
    path = _clean_repo_path(path)
    with _open_repo(ctx) as repo, _WikiErrors():
        directory = find_directory_or_fail(repo, path, revision)
        output = directory.archive(dest)
    _status(ctx, f"Wrote {output}")
    click.echo(str(output))
