"""Mapping repository names to local checkout paths."""

from __future__ import annotations

from typing import Mapping, Optional


def get_repo_local_path(repo_name: str, cfg_paths: Mapping[str, str]) -> Optional[str]:
    """Local path for ``owner/repo``, or None when the config has no entry.

    An exact match wins over an ``owner/*`` wildcard entry, whose trailing
    ``/*`` is replaced by the repository name.
    """
    exact = cfg_paths.get(repo_name)
    if exact is not None:
        return exact

    parts = repo_name.split("/")
    if len(parts) != 2:
        return None
    owner, repo = parts

    wildcard = cfg_paths.get(f"{owner}/*")
    if wildcard is None:
        return None

    base = wildcard[: -len("/*")] if wildcard.endswith("/*") else wildcard
    return f"{base}/{repo}"