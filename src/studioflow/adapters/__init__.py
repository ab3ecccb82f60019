"""Repository adapters for different source types."""
from ..core.errors import InvalidInputError
from ..core.models import Config
from ..utils.url import describe_invalid_url, is_valid_repo_url, normalize_repo_url
from .base import RepositoryAdapter
from .demo import DEMO_REPO_URL, DemoAdapter
from .github import GitHubAdapter


def create_adapter(repo_url: str, config: Config, demo: bool = False) -> RepositoryAdapter:
    """
    Create the adapter for a repository URL.

    Args:
        repo_url: GitHub URL as typed by the user
        config: Configuration object
        demo: Use the offline demo dataset instead of GitHub

    Returns:
        Appropriate RepositoryAdapter instance

    Raises:
        InvalidInputError: If the URL is not a GitHub repository URL
    """
    if demo:
        return DemoAdapter(config, repo_url or DEMO_REPO_URL)

    if not repo_url or not repo_url.strip():
        raise InvalidInputError(describe_invalid_url(repo_url))

    # Accept URLs with sub-paths, query strings or .git by normalizing first
    try:
        normalized = normalize_repo_url(repo_url)
    except InvalidInputError:
        raise InvalidInputError(describe_invalid_url(repo_url)) from None
    if not repo_url.strip().startswith('https://') or not is_valid_repo_url(normalized):
        raise InvalidInputError(describe_invalid_url(repo_url))

    return GitHubAdapter(normalized, config)


__all__ = ['RepositoryAdapter', 'GitHubAdapter', 'DemoAdapter', 'DEMO_REPO_URL', 'create_adapter']
