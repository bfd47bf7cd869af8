"""gitwiki CLI: browse and edit documents in a bare git repository."""

from ._helpers import main  # noqa: F401

# Import command modules to register Click commands with the main group.
from . import _basic, _archive  # noqa: F401
