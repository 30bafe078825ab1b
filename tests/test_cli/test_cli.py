"""Tests for CLI commands."""

import pytest
from click.testing import CliRunner

from imgcache.cli import cli

URL = "https://a.com/img.jpg"


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def fake_transport(monkeypatch, make_transport):
    """Replace the HTTP transport the CLI builds with a fake."""
    transport = make_transport()
    monkeypatch.setattr("imgcache.cache.manager.HttpxTransport", lambda timeout: transport)
    return transport


@pytest.fixture
def root_args(tmp_path):
    return ["--cache-root", str(tmp_path)]


class TestCLIGroup:
    def test_help(self, runner):
        result = runner.invoke(cli, ["--help"])
        assert result.exit_code == 0
        assert "Usage: imgcache" in result.output
        assert "imgcache: content-addressed" in result.output

    def test_version(self, runner):
        result = runner.invoke(cli, ["--version"])
        assert result.exit_code == 0

    def test_lists_commands(self, runner):
        result = runner.invoke(cli, ["--help"])
        for name in ("fetch", "path", "prefetch", "delete", "clear", "stats"):
            assert name in result.output


class TestFetchAndPath:
    def test_fetch_then_path(self, runner, root_args, fake_transport, tmp_path):
        fetched = runner.invoke(cli, [*root_args, "fetch", URL])
        assert fetched.exit_code == 0, fetched.output
        stored = fetched.stdout.strip()
        assert stored.startswith(str(tmp_path))
        assert len(fake_transport.calls) == 1

        found = runner.invoke(cli, [*root_args, "path", URL])
        assert found.exit_code == 0
        assert found.stdout.strip() == stored

    def test_fetch_with_group_and_header(self, runner, root_args, fake_transport, tmp_path):
        result = runner.invoke(
            cli, [*root_args, "fetch", URL, "--group", "avatars", "-H", "Authorization: Bearer t"]
        )
        assert result.exit_code == 0, result.output
        assert "/avatars/" in result.output
        assert fake_transport.calls[0][2] == {"Authorization": "Bearer t"}

    def test_fetch_bad_header(self, runner, root_args, fake_transport):
        result = runner.invoke(cli, [*root_args, "fetch", URL, "-H", "no-colon"])
        assert result.exit_code != 0
        assert fake_transport.calls == []

    def test_fetch_bad_group(self, runner, root_args, fake_transport):
        result = runner.invoke(cli, [*root_args, "fetch", URL, "--group", "a/b"])
        assert result.exit_code != 0

    def test_fetch_non_cacheable_fails(self, runner, root_args, fake_transport):
        result = runner.invoke(cli, [*root_args, "fetch", "ftp://x/y.png"])
        assert result.exit_code == 1
        assert fake_transport.calls == []

    def test_path_miss_exits_1(self, runner, root_args, fake_transport):
        result = runner.invoke(cli, [*root_args, "path", URL])
        assert result.exit_code == 1

    def test_query_params_change_path(self, runner, root_args, fake_transport):
        a = runner.invoke(cli, [*root_args, "fetch", URL + "?w=1", "--query-params", "w"])
        b = runner.invoke(cli, [*root_args, "fetch", URL + "?w=2", "--query-params", "w"])
        assert a.exit_code == 0 and b.exit_code == 0
        assert a.stdout.strip() != b.stdout.strip()


class TestPrefetch:
    def test_report(self, runner, root_args, fake_transport):
        result = runner.invoke(
            cli, [*root_args, "prefetch", "https://a.com/1.jpg", "not-a-url", "https://a.com/2.jpg"]
        )
        assert result.exit_code == 0, result.output
        assert "Prefetch Report" in result.output
        assert len(fake_transport.calls) == 2

    def test_from_file(self, runner, root_args, fake_transport, tmp_path):
        url_file = tmp_path / "urls.txt"
        url_file.write_text("https://a.com/1.jpg\n\nhttps://a.com/2.jpg\n")
        result = runner.invoke(
            cli, [*root_args, "prefetch", "--from-file", str(url_file), "--workers", "1"]
        )
        assert result.exit_code == 0, result.output
        assert len(fake_transport.calls) == 2

    def test_no_urls(self, runner, root_args, fake_transport):
        result = runner.invoke(cli, [*root_args, "prefetch"])
        assert result.exit_code == 0
        assert fake_transport.calls == []


class TestBadConfig:
    @pytest.mark.parametrize(
        "env",
        [{"IMGCACHE_PREFETCH_WORKERS": "0"}, {"IMGCACHE_TIMEOUT": "abc"}],
    )
    def test_invalid_env_value_is_reported(self, runner, root_args, fake_transport, env):
        result = runner.invoke(cli, [*root_args, "prefetch", URL], env=env)
        assert result.exit_code == 1
        assert isinstance(result.exception, SystemExit)
        assert fake_transport.calls == []


class TestDeleteAndClear:
    def test_delete(self, runner, root_args, fake_transport):
        runner.invoke(cli, [*root_args, "fetch", URL])
        result = runner.invoke(cli, [*root_args, "delete", URL])
        assert result.exit_code == 0
        assert "Deleted" in result.output
        assert runner.invoke(cli, [*root_args, "path", URL]).exit_code == 1

    def test_delete_absent_ok(self, runner, root_args, fake_transport):
        result = runner.invoke(cli, [*root_args, "delete", URL])
        assert result.exit_code == 0

    def test_clear_needs_confirmation(self, runner, root_args, fake_transport):
        result = runner.invoke(cli, [*root_args, "clear"], input="n\n")
        assert result.exit_code != 0

    def test_clear_with_yes(self, runner, root_args, fake_transport):
        runner.invoke(cli, [*root_args, "fetch", URL])
        result = runner.invoke(cli, [*root_args, "clear", "--yes"])
        assert result.exit_code == 0
        assert "cleared" in result.output.lower()
        assert runner.invoke(cli, [*root_args, "path", URL]).exit_code == 1


class TestStats:
    def test_stats_table(self, runner, root_args, fake_transport):
        runner.invoke(cli, [*root_args, "fetch", URL])
        result = runner.invoke(cli, [*root_args, "stats"])
        assert result.exit_code == 0
        assert "Cache Statistics" in result.output
        assert "Files" in result.output
