"""Store configuration defaults."""

from __future__ import annotations

import os
from dataclasses import dataclass, replace

DEFAULT_HISTORY_LIMIT = 30
DEFAULT_MESSAGE = "(Empty commit message)"
DEFAULT_MIME = "application/octet-stream"


@dataclass(frozen=True, slots=True)
class StoreConfig:
    """Settings shared by every node resolved through one repository.

    Attributes:
        branch: Branch whose tip is the "current" state.
        author: Default author name for commits.
        email: Default author email for commits.
        default_message: Commit message used when the caller passes a blank one.
        default_mime: MIME type used when neither extension nor content match.
        history_limit: Size of the history window kept per node.
    """

    branch: str = "main"
    author: str = "gitwiki"
    email: str = "gitwiki@localhost"
    default_message: str = DEFAULT_MESSAGE
    default_mime: str = DEFAULT_MIME
    history_limit: int = DEFAULT_HISTORY_LIMIT

    def __post_init__(self) -> None:
        if self.history_limit < 2:
            raise ValueError(f"history_limit must be >= 2, got {self.history_limit}")
        for ch in (":", " ", "\t", "\n"):
            if ch in self.branch:
                raise ValueError(f"Invalid branch name {self.branch!r}")

    @classmethod
    def from_env(cls, environ: dict[str, str] | None = None, **overrides) -> StoreConfig:
        """Build a config from ``GITWIKI_*`` environment variables.

        Keyword *overrides* win over the environment.
        """
        env = os.environ if environ is None else environ
        values: dict[str, object] = {}
        for key, var in (
            ("branch", "GITWIKI_BRANCH"),
            ("author", "GITWIKI_AUTHOR"),
            ("email", "GITWIKI_EMAIL"),
            ("default_mime", "GITWIKI_DEFAULT_MIME"),
        ):
            if env.get(var):
                values[key] = env[var]
        if env.get("GITWIKI_HISTORY_LIMIT"):
            try:
                values["history_limit"] = int(env["GITWIKI_HISTORY_LIMIT"])
            except ValueError:
                raise ValueError(
                    f"GITWIKI_HISTORY_LIMIT must be an integer, got {env['GITWIKI_HISTORY_LIMIT']!r}"
                )
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)

    def with_branch(self, branch: str) -> StoreConfig:
        return replace(self, branch=branch)
