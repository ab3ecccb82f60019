"""GitHub repository URL validation and normalization."""

import re
from typing import Tuple
from urllib.parse import urlsplit

from ..core.errors import InvalidInputError

GITHUB_HOST = "github.com"
GITHUB_HOSTS = frozenset({GITHUB_HOST, "www.github.com"})

_REPO_URL_PATTERN = re.compile(r'^https://github\.com/[\w\-.]+/[\w\-.]+/?$')
_OWNER_REPO_PATTERN = re.compile(r'^/?([^/?#\s]+)/([^/?#\s]+)')


def _split_host(url: str) -> Tuple[str, str]:
    """Split ``url`` into ``(host, path)``; a scheme-less URL starts with its host."""
    parts = urlsplit(url.strip())
    if parts.netloc:
        return (parts.hostname or ''), parts.path
    host, _, path = parts.path.partition('/')
    return host.lower(), path


def is_valid_repo_url(url: str) -> bool:
    """Check for ``https://github.com/<owner>/<repo>`` with an optional trailing slash."""
    if not url or not isinstance(url, str):
        return False
    return bool(_REPO_URL_PATTERN.match(url.strip()))


def describe_invalid_url(url: str) -> str:
    """Explain why ``url`` was rejected, in words a user can act on."""
    if not url or not url.strip():
        return "Please enter a repository URL."
    host, _ = _split_host(url)
    if host not in GITHUB_HOSTS:
        return ("Only GitHub repository URLs are supported. "
                "Please use a URL like: https://github.com/owner/repository")
    if not url.strip().startswith('https://'):
        return "Please use HTTPS URLs. Example: https://github.com/owner/repository"
    return "Invalid GitHub URL format. Please use: https://github.com/owner/repository"


def parse_owner_repo(url: str) -> Tuple[str, str]:
    """
    Extract ``(owner, repo)`` from a GitHub URL.

    Only ``github.com`` hosts are accepted, and owner and repository must
    be the first two path segments.

    Raises:
        InvalidInputError: If the URL does not name an owner and repository.
    """
    host, path = _split_host(url or "")
    if host not in GITHUB_HOSTS:
        raise InvalidInputError("Invalid GitHub repository URL")
    match = _OWNER_REPO_PATTERN.match(path)
    if not match:
        raise InvalidInputError("Invalid GitHub repository URL")
    owner, repo = match.group(1), match.group(2)
    if repo.endswith('.git'):
        repo = repo[:-4]
    if not owner or not repo:
        raise InvalidInputError("Invalid GitHub repository URL")
    return owner, repo


def normalize_repo_url(url: str) -> str:
    """
    Reduce a GitHub URL to ``https://github.com/<owner>/<repo>``.

    Drops query string, fragment, ``.git`` suffix and any sub-path such as
    ``/tree/main/src``.
    """
    owner, repo = parse_owner_repo(url)
    return f"https://{GITHUB_HOST}/{owner}/{repo}"
