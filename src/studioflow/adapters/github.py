"""GitHub repository adapter implementation."""
import asyncio
import base64
import logging
from typing import Any, List, Optional
from urllib.parse import quote

import aiohttp
from github import Auth, Github, GithubException
from yarl import URL

from ..core.errors import (
    NetworkError,
    NotFoundError,
    RateLimitedError,
    StudioFlowError,
    TooLargeError,
)
from ..core.models import Config, FileContent, RemoteEntry, TreeNode
from ..utils.path_utils import PathUtils
from ..utils.tree_builder import FileTreeBuilder
from ..utils.url import parse_owner_repo
from .base import RepositoryAdapter

logger = logging.getLogger(__name__)

RATE_LIMIT_MESSAGE = (
    "GitHub API rate limit exceeded. Please add a GITHUB_TOKEN to your .env file "
    "to make authenticated requests, or try again later."
)


class AsyncGitHubClient:
    """Async GitHub contents client with proper resource management."""

    def __init__(self, token: str, owner: str, repo: str, config: Config,
                 branch: Optional[str] = None):
        self.token = token
        self.owner = owner
        self.repo = repo
        self.branch = branch
        self.config = config
        self.session: Optional[aiohttp.ClientSession] = None

    async def __aenter__(self):
        """Async context manager entry with session setup."""
        headers = {
            'Accept': 'application/vnd.github.v3+json',
            'User-Agent': 'studioflow'
        }
        if self.token:
            headers['Authorization'] = f'token {self.token}'
        connector = aiohttp.TCPConnector(
            limit=self.config.connection_limit,
            limit_per_host=self.config.connection_limit_per_host
        )
        timeout = aiohttp.ClientTimeout(total=self.config.request_timeout)
        self.session = aiohttp.ClientSession(headers=headers, connector=connector, timeout=timeout)
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit with guaranteed cleanup."""
        if self.session and not self.session.closed:
            await self.session.close()

    def _redact(self, text: str) -> str:
        if self.token and self.token in text:
            return text.replace(self.token, "[REDACTED]")
        return text

    async def fetch_file(self, file_path: str) -> FileContent:
        """
        Fetch and decode a single file.

        Raises:
            NotFoundError: 404 from the contents API.
            RateLimitedError: 403 or 429.
            TooLargeError: File above the configured size or refused as too large.
            NetworkError: Transport failure or timeout.
            StudioFlowError: Anything else (directory path, undecodable bytes).
        """
        api_path = PathUtils.strip_leading_slash(PathUtils.normalize_path(file_path))
        # Segments are percent-encoded so "#" and "?" in names stay part of the path
        url = URL(f"{self.config.github_api_url}/repos/{self.owner}/{self.repo}/contents/"
                  f"{quote(api_path, safe='/')}", encoded=True)

        params = {}
        if self.branch:
            params['ref'] = self.branch

        try:
            async with self.session.get(url, params=params) as response:
                if response.status != 200:
                    error_text = await response.text()
                    raise self._status_error(response.status, error_text, file_path)
                data = await response.json()
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise NetworkError(f"Network error while fetching {file_path}: {self._redact(str(e))}") from e

        return self._decode(file_path, data)

    def _status_error(self, status: int, error_text: str, file_path: str) -> StudioFlowError:
        logger.debug("GitHub contents API returned %s for %s: %s", status, file_path,
                     self._redact(error_text))
        if status == 404:
            return NotFoundError(f"File not found: {file_path}", status=status)
        if status in (403, 429):
            return RateLimitedError(RATE_LIMIT_MESSAGE, status=status)
        if status == 422 and 'too_large' in error_text:
            return TooLargeError("File is too large to fetch content. Maximum size is 1MB.", status=status)
        return StudioFlowError(f"Failed to fetch file content: HTTP {status}", status=status)

    def _decode(self, file_path: str, data: Any) -> FileContent:
        if isinstance(data, list):
            raise StudioFlowError("Expected file but got directory")
        if data.get('type') != 'file':
            raise StudioFlowError("Path does not point to a file")

        file_size = data.get('size', 0) or 0
        if file_size > self.config.max_file_size:
            raise TooLargeError(f"File too large ({file_size:,} bytes). Maximum size is 1MB.")

        encoding = data.get('encoding') or 'utf-8'
        raw = data.get('content') or ''
        if encoding != 'base64':
            # Large blobs come back with encoding "none" and no content
            if not raw and file_size:
                raise TooLargeError("File is too large to fetch content. Maximum size is 1MB.")
            return FileContent(content=raw, encoding=encoding, size=file_size)

        content_bytes = base64.b64decode(raw.replace('\n', ''))
        for encoding_name in self.config.encoding_fallbacks:
            try:
                text = content_bytes.decode(encoding_name)
                return FileContent(content=text, encoding=encoding, size=file_size)
            except UnicodeDecodeError:
                continue

        raise StudioFlowError(f"Unable to decode file: {file_path}")


class GitHubAdapter(RepositoryAdapter):
    """Adapter for exploring GitHub repositories."""

    def __init__(self, repo_url: str, config: Config):
        """Initialize GitHub adapter with repository URL."""
        super().__init__(repo_url, config)

        self.owner, self.repo_name = parse_owner_repo(repo_url)

        # Anonymous access works for public repositories at a lower rate limit
        if config.github_token:
            self.github = Github(auth=Auth.Token(config.github_token))
        else:
            logger.info("GITHUB_TOKEN not set, using unauthenticated GitHub access")
            self.github = Github()
        self._repo = None

    @property
    def repo(self):
        if self._repo is None:
            self._repo = self._call(self.github.get_repo, f"{self.owner}/{self.repo_name}")
        return self._repo

    def get_name(self) -> str:
        """Get repository name."""
        return self.repo_name

    def _call(self, func, *args, **kwargs):
        """Run a PyGithub call, translating failures into StudioFlow errors."""
        try:
            return func(*args, **kwargs)
        except GithubException as e:
            logger.error("Error fetching data for %s: %s", self.repo_url,
                         self._sanitize_error(str(e), [self.config.github_token]))
            if e.status == 404:
                raise NotFoundError(
                    f"Repository not found at {self.repo_url}. Please check the URL "
                    "and ensure the repository is public.",
                    status=e.status,
                ) from e
            if e.status in (403, 429):
                raise RateLimitedError(RATE_LIMIT_MESSAGE, status=e.status) from e
            raise StudioFlowError(
                "Failed to fetch repository data. Please ensure the repository is "
                "public and accessible.",
                status=e.status,
            ) from e
        except OSError as e:
            # requests' exceptions derive from IOError
            raise NetworkError(
                f"Network error while contacting GitHub: "
                f"{self._sanitize_error(str(e), [self.config.github_token])}"
            ) from e

    def get_default_branch_tree_sha(self) -> str:
        """Resolve the tree sha at the head of the default branch."""
        repo = self.repo
        self.branch = repo.default_branch
        branch = self._call(repo.get_branch, self.branch)
        tree_sha = branch.commit.commit.tree.sha
        if not tree_sha:
            raise StudioFlowError("Could not find tree SHA for the default branch.")
        return tree_sha

    def get_tree_recursive(self, tree_sha: str) -> List[RemoteEntry]:
        """List every entry below ``tree_sha``."""
        tree = self._call(self.repo.get_git_tree, tree_sha, recursive=True)
        return [
            RemoteEntry(path=element.path, kind=element.type, id=element.sha)
            for element in tree.tree
        ]

    def fetch_tree(self) -> List[TreeNode]:
        """Fetch the default branch listing and build the placeholder tree."""
        tree_sha = self.get_default_branch_tree_sha()
        entries = self.get_tree_recursive(tree_sha)
        logger.info("Fetched %d entries for %s/%s@%s", len(entries), self.owner,
                    self.repo_name, self.branch)
        return FileTreeBuilder.from_entries(entries)

    async def fetch_file_content(self, file_path: str, file_id: str) -> FileContent:
        """Fetch one file through the contents API."""
        async with AsyncGitHubClient(self.config.github_token, self.owner, self.repo_name,
                                     self.config, branch=self.branch) as client:
            return await client.fetch_file(file_path)
