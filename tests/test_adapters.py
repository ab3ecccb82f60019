import asyncio
import base64
from unittest.mock import MagicMock, patch

import aiohttp
import pytest
from github import GithubException

from studioflow.adapters import DEMO_REPO_URL, create_adapter
from studioflow.adapters.demo import DemoAdapter, simulate_file_content
from studioflow.adapters.github import AsyncGitHubClient, GitHubAdapter
from studioflow.core.errors import (
    ErrorKind,
    InvalidInputError,
    NetworkError,
    NotFoundError,
    RateLimitedError,
    StudioFlowError,
    TooLargeError,
)
from studioflow.core.models import Config, FolderNode
from studioflow.core.tree import count_files, find_by_path, is_placeholder


class FakeResponse:
    def __init__(self, status=200, payload=None, body=""):
        self.status = status
        self.payload = payload
        self.body = body

    async def json(self):
        return self.payload

    async def text(self):
        return self.body

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc):
        return False


class FakeSession:
    def __init__(self, response=None, error=None):
        self.response = response
        self.error = error
        self.calls = []

    def get(self, url, params=None):
        self.calls.append((url, params))
        if self.error is not None:
            raise self.error
        return self.response


def _element(path, kind, sha):
    element = MagicMock()
    element.path = path
    element.type = kind
    element.sha = sha
    return element


class TestAdapterFactory:
    def test_create_github_adapter(self, config):
        with patch('studioflow.adapters.github.Github'):
            adapter = create_adapter("https://github.com/user/repo", config)
            assert isinstance(adapter, GitHubAdapter)
            assert adapter.repo_url == "https://github.com/user/repo"

    def test_url_is_normalized(self, config):
        with patch('studioflow.adapters.github.Github'):
            adapter = create_adapter("https://github.com/user/repo.git/tree/main?tab=readme", config)
            assert adapter.repo_url == "https://github.com/user/repo"
            assert adapter.repo_name == "repo"

    def test_demo_adapter(self, config):
        adapter = create_adapter("", config, demo=True)
        assert isinstance(adapter, DemoAdapter)
        assert adapter.repo_url == DEMO_REPO_URL

    @pytest.mark.parametrize("url, message", [
        ("", "Please enter a repository URL."),
        ("https://gitlab.com/user/repo", "Only GitHub repository URLs are supported"),
        ("https://gitlab.com/github.com/user/repo", "Only GitHub repository URLs are supported"),
        ("https://evilgithub.com/user/repo", "Only GitHub repository URLs are supported"),
        ("http://github.com/user/repo", "Please use HTTPS URLs"),
        ("https://github.com/user", "Invalid GitHub URL format"),
    ])
    def test_invalid_urls(self, config, url, message):
        with pytest.raises(InvalidInputError, match=message):
            create_adapter(url, config)


class TestGitHubAdapter:
    @pytest.fixture
    def mock_github(self):
        with patch('studioflow.adapters.github.Github') as mock:
            yield mock

    @pytest.fixture
    def mock_repo(self, mock_github):
        repo = MagicMock()
        repo.default_branch = "main"
        repo.get_branch.return_value.commit.commit.tree.sha = "tree-sha"
        repo.get_git_tree.return_value.tree = [
            _element("src", "tree", "t-src"),
            _element("src/app.tsx", "blob", "b-app"),
            _element("pkg.json", "blob", "b-pkg"),
            _element("vendor", "commit", "c-vendor"),
        ]
        mock_github.return_value.get_repo.return_value = repo
        return repo

    def test_initialization(self, mock_github, config):
        adapter = GitHubAdapter("https://github.com/user/repo", config)
        assert adapter.owner == "user"
        assert adapter.repo_name == "repo"
        assert adapter.get_name() == "repo"
        mock_github.assert_called_once_with()

    def test_token_is_used(self, mock_github):
        GitHubAdapter("https://github.com/user/repo", Config(github_token="secret-token"))
        assert "auth" in mock_github.call_args.kwargs

    def test_fetch_tree(self, mock_github, mock_repo, config):
        adapter = GitHubAdapter("https://github.com/user/repo", config)
        nodes = adapter.fetch_tree()

        mock_github.return_value.get_repo.assert_called_once_with("user/repo")
        mock_repo.get_git_tree.assert_called_once_with("tree-sha", recursive=True)
        assert adapter.branch == "main"
        assert count_files(nodes) == 2
        assert isinstance(find_by_path(nodes, "src"), FolderNode)
        assert is_placeholder(find_by_path(nodes, "src/app.tsx").content)

    @pytest.mark.parametrize("status, error_type", [
        (404, NotFoundError),
        (403, RateLimitedError),
        (429, RateLimitedError),
        (500, StudioFlowError),
    ])
    def test_fetch_tree_errors(self, mock_github, config, status, error_type):
        mock_github.return_value.get_repo.side_effect = GithubException(status, {"message": "x"}, None)
        adapter = GitHubAdapter("https://github.com/user/repo", config)

        with pytest.raises(error_type) as exc_info:
            adapter.fetch_tree()
        assert exc_info.value.status == status

    def test_not_found_message(self, mock_github, config):
        mock_github.return_value.get_repo.side_effect = GithubException(404, {"message": "Not Found"}, None)
        adapter = GitHubAdapter("https://github.com/user/repo", config)

        with pytest.raises(NotFoundError, match="Repository not found at https://github.com/user/repo"):
            adapter.fetch_tree()

    def test_connection_failure(self, mock_github, config):
        mock_github.return_value.get_repo.side_effect = ConnectionError("connection refused")
        adapter = GitHubAdapter("https://github.com/user/repo", config)

        with pytest.raises(NetworkError):
            adapter.fetch_tree()


class TestAsyncGitHubClient:
    def _client(self, config, session):
        client = AsyncGitHubClient("secret-token", "user", "repo", config, branch="main")
        client.session = session
        return client

    def _payload(self, text, **overrides):
        payload = {
            "type": "file",
            "encoding": "base64",
            "size": len(text.encode("utf-8")),
            "content": base64.b64encode(text.encode("utf-8")).decode("ascii"),
        }
        payload.update(overrides)
        return payload

    def test_fetch_file(self, config):
        session = FakeSession(FakeResponse(payload=self._payload("print('hi')\n")))
        client = self._client(config, session)

        result = asyncio.run(client.fetch_file("/src/main.py"))

        assert result.content == "print('hi')\n"
        url, params = session.calls[0]
        assert str(url) == "https://api.github.com/repos/user/repo/contents/src/main.py"
        assert params == {"ref": "main"}

    @pytest.mark.parametrize("path, expected", [
        ("docs/C#/intro.md", "/repos/user/repo/contents/docs/C%23/intro.md"),
        ("what?.md", "/repos/user/repo/contents/what%3F.md"),
        ("notes/50% off.txt", "/repos/user/repo/contents/notes/50%25%20off.txt"),
    ])
    def test_path_segments_are_encoded(self, config, path, expected):
        session = FakeSession(FakeResponse(payload=self._payload("x")))
        client = self._client(config, session)

        asyncio.run(client.fetch_file(path))

        url, _ = session.calls[0]
        assert url.raw_path == expected
        assert url.query_string == ""
        assert url.fragment == ""

    @pytest.mark.parametrize("status, body, error_type", [
        (404, "", NotFoundError),
        (403, "", RateLimitedError),
        (429, "", RateLimitedError),
        (422, '{"errors": [{"code": "too_large"}]}', TooLargeError),
        (500, "", StudioFlowError),
    ])
    def test_status_errors(self, config, status, body, error_type):
        client = self._client(config, FakeSession(FakeResponse(status=status, body=body)))

        with pytest.raises(error_type) as exc_info:
            asyncio.run(client.fetch_file("big.bin"))
        assert exc_info.value.status == status

    def test_network_error_redacts_token(self, config):
        error = aiohttp.ClientConnectionError("failed with secret-token")
        client = self._client(config, FakeSession(error=error))

        with pytest.raises(NetworkError) as exc_info:
            asyncio.run(client.fetch_file("a.py"))
        assert "secret-token" not in exc_info.value.message
        assert exc_info.value.kind == ErrorKind.NETWORK

    def test_directory_is_rejected(self, config):
        client = self._client(config, None)
        with pytest.raises(StudioFlowError, match="directory"):
            client._decode("src", [{"name": "a.py"}])

    def test_oversized_file(self, config):
        client = self._client(config, None)
        with pytest.raises(TooLargeError):
            client._decode("big.bin", self._payload("x", size=config.max_file_size + 1))

    def test_large_blob_without_content(self, config):
        client = self._client(config, None)
        payload = {"type": "file", "encoding": "none", "size": 5000, "content": ""}
        with pytest.raises(TooLargeError):
            client._decode("big.bin", payload)

    def test_latin1_fallback(self, config):
        client = self._client(config, None)
        raw = "café".encode("latin-1")
        payload = {"type": "file", "encoding": "base64", "size": len(raw),
                   "content": base64.b64encode(raw).decode("ascii")}
        assert client._decode("notes.txt", payload).content == "café"


class TestDemoAdapter:
    def test_tree(self, demo_adapter):
        nodes = demo_adapter.fetch_tree()
        assert count_files(nodes) == 6
        assert demo_adapter.get_name() == "demo"

    def test_fetch_known_file(self, demo_adapter):
        text = asyncio.run(demo_adapter.fetch_text("README.md", "id"))
        assert text == simulate_file_content("README.md")
        assert not is_placeholder(text)

    def test_fetch_unknown_file(self, demo_adapter):
        with pytest.raises(NotFoundError):
            asyncio.run(demo_adapter.fetch_text("nope.txt", "id"))
