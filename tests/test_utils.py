import re

import pytest

from errors import SecretResolutionError
from utils import display_name, repository_name, resolve_secret, sanitize_id, short_digest


@pytest.mark.parametrize(
    "image, repo",
    [
        ("registry.io/ns/repo:1.2", "registry.io/ns/repo"),
        ("repo@sha256:abcd", "repo"),
        ("registry.io/ns/repo:1.2@sha256:abcd", "registry.io/ns/repo"),
        ("docker.io/library/nginx:latest", "docker.io/library/nginx"),
        ("alpine", "alpine"),
    ],
)
def test_repository_name(image, repo):
    assert repository_name(image) == repo


def test_repository_name_cuts_at_registry_port():
    # Tag split comes first, so a port in the host ends the repository path.
    assert repository_name("localhost:5000/team/app:1.0") == "localhost"


def test_display_name():
    assert display_name("registry.io/ns/repo") == "repo"
    assert display_name("repo") == "repo"


@pytest.mark.parametrize(
    "repo",
    [
        "docker.io/library/nginx",
        "ghcr.io/crazy-max/diun",
        "my_registry/some.repo/with spaces",
        "ünïcödé/répo",
        "",
    ],
)
def test_sanitize_id_is_safe_and_same_length(repo):
    out = sanitize_id(repo)
    assert re.fullmatch(r"[A-Za-z0-9_-]*", out)
    assert len(out) == len(repo)
    assert sanitize_id(repo) == out


def test_sanitize_id_keeps_safe_chars():
    assert sanitize_id("docker.io/library/nginx") == "docker-io-library-nginx"
    assert sanitize_id("a_b-C9") == "a_b-C9"


def test_short_digest():
    assert short_digest("sha256:deadbeefcafef00d") == "cafef00d"
    assert short_digest("abc") == "abc"
    assert short_digest("12345678") == "12345678"
    assert short_digest("") == ""


def test_resolve_secret_prefers_inline_value(tmp_path):
    secret = tmp_path / "pass"
    secret.write_text("from-file")
    assert resolve_secret("inline", str(secret)) == "inline"


def test_resolve_secret_reads_and_strips_file(tmp_path):
    secret = tmp_path / "pass"
    secret.write_text("  s3cret\n")
    assert resolve_secret("", str(secret)) == "s3cret"


def test_resolve_secret_empty_when_unset():
    assert resolve_secret("", "") == ""


def test_resolve_secret_missing_file(tmp_path):
    with pytest.raises(SecretResolutionError):
        resolve_secret("", str(tmp_path / "nope"))
