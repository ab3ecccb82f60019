import pytest

from studioflow.core.errors import InvalidInputError
from studioflow.core.models import LineDifference
from studioflow.utils.compare import compare_lines, format_file_size
from studioflow.utils.url import (
    describe_invalid_url,
    is_valid_repo_url,
    normalize_repo_url,
    parse_owner_repo,
)


class TestRepoUrls:
    @pytest.mark.parametrize("url", [
        "https://github.com/user/repo",
        "https://github.com/user/repo/",
        "https://github.com/my-org/my.repo_v2",
    ])
    def test_valid(self, url):
        assert is_valid_repo_url(url)

    @pytest.mark.parametrize("url", [
        "",
        None,
        "http://github.com/user/repo",
        "https://gitlab.com/user/repo",
        "https://github.com/user",
        "https://github.com/user/repo/tree/main",
    ])
    def test_invalid(self, url):
        assert not is_valid_repo_url(url)

    @pytest.mark.parametrize("url, expected", [
        ("https://github.com/user/repo.git", "https://github.com/user/repo"),
        ("https://github.com/user/repo?tab=readme#top", "https://github.com/user/repo"),
        ("https://github.com/user/repo/tree/main/src", "https://github.com/user/repo"),
        ("github.com/user/repo", "https://github.com/user/repo"),
        ("  https://github.com/user/repo/  ", "https://github.com/user/repo"),
    ])
    def test_normalize(self, url, expected):
        assert normalize_repo_url(url) == expected

    def test_normalize_rejects_non_repo(self):
        with pytest.raises(InvalidInputError):
            normalize_repo_url("https://example.com/user/repo")

    @pytest.mark.parametrize("url", [
        "https://gitlab.com/github.com/owner/repo",
        "https://evilgithub.com/owner/repo",
        "https://github.com.example.org/owner/repo",
        "evilgithub.com/owner/repo",
    ])
    def test_normalize_rejects_other_hosts(self, url):
        with pytest.raises(InvalidInputError):
            normalize_repo_url(url)

    def test_normalize_accepts_www_host(self):
        assert normalize_repo_url("https://www.github.com/user/repo") == "https://github.com/user/repo"

    def test_parse_owner_repo(self):
        assert parse_owner_repo("https://github.com/pallets/click.git") == ("pallets", "click")

    def test_describe(self):
        assert describe_invalid_url("  ") == "Please enter a repository URL."
        assert describe_invalid_url("https://bitbucket.org/a/b").startswith("Only GitHub")
        assert describe_invalid_url("http://github.com/a/b").startswith("Please use HTTPS")
        assert describe_invalid_url("https://github.com/a").startswith("Invalid GitHub URL format")


class TestCompareLines:
    def test_identical(self):
        assert compare_lines("a\nb", "a\nb") == []

    def test_changed_line(self):
        assert compare_lines("a\nb\nc", "a\nB\nc") == [LineDifference(line=2, left="b", right="B")]

    def test_uneven_lengths(self):
        assert compare_lines("a", "a\nb") == [LineDifference(line=2, left="", right="b")]

    def test_insertion_shifts_following_lines(self):
        differences = compare_lines("a\nb\nc", "x\na\nb\nc")
        assert [d.line for d in differences] == [1, 2, 3, 4]


class TestFormatFileSize:
    @pytest.mark.parametrize("size, expected", [
        (0, "0 Bytes"),
        (-5, "0 Bytes"),
        (500, "500 Bytes"),
        (1024, "1 KB"),
        (1536, "1.5 KB"),
        (1024 * 1024, "1 MB"),
        (1024 ** 3, "1 GB"),
        (5 * 1024 ** 4, "5120 GB"),
    ])
    def test_sizes(self, size, expected):
        assert format_file_size(size) == expected
