# tests/unit/test_explorer_cli.py - Tests for the gh-explorer CLI
from unittest.mock import AsyncMock

import pytest

from gh_explorer.cli.explorer_cli import build_parser, main
from gh_explorer.core import config as config_module
from gh_explorer.core.config import reset_config
from gh_explorer.remote.github_client import ApiResponse


@pytest.fixture
def run_cli(build_test_fetcher):
    """Run main() with a test fetcher; returns (exit_code, fetcher)"""

    def _run(*argv):
        fetcher = build_test_fetcher()
        code = main(list(argv), fetcher_factory=lambda: fetcher)
        return code, fetcher

    return _run


class TestExplorerCLI:
    """Test CLI commands"""

    def test_random(self, run_cli, capsys, factories):
        code, fetcher = run_cli("random", "Python")

        out = capsys.readouterr().out
        assert code == 0
        assert "🎲 Picking a random Python repository..." in out
        assert fetcher.current_repository.full_name in out
        assert "⭐ Stars:" in out

    def test_random_failure(self, run_cli, capsys, mock_github_client, factories):
        mock_github_client.search_repositories.return_value = ApiResponse(
            status=403, headers=factories.rate_headers(remaining=0)
        )

        code, _ = run_cli("random", "Python")

        assert code == 1
        assert "❌ Rate limit exceeded. Wait 60 minutes until" in capsys.readouterr().out

    def test_prefetch(self, run_cli, capsys):
        code, _ = run_cli("prefetch", "Go")

        assert code == 0
        assert "✅ Cached 2 repositories for Go" in capsys.readouterr().out

    def test_prefetch_failure(self, run_cli, capsys, mock_github_client):
        mock_github_client.search_repositories.return_value = ApiResponse(status=200, body={})

        code, _ = run_cli("prefetch", "Go")

        assert code == 1
        assert "❌ Prefetch failed for Go" in capsys.readouterr().out

    def test_rate_limit(self, run_cli, capsys):
        code, _ = run_cli("rate-limit")

        out = capsys.readouterr().out
        assert code == 0
        assert "Limit: 5000" in out
        assert "Remaining: 4000" in out

    def test_rate_limit_unknown(self, run_cli, capsys, mock_github_client):
        mock_github_client.fetch_rate_limit = AsyncMock(return_value=ApiResponse(status=500))

        code, _ = run_cli("rate-limit")

        assert code == 1
        assert "Rate limit unknown" in capsys.readouterr().out

    def test_sweep(self, run_cli, capsys):
        code, _ = run_cli("sweep")

        assert code == 0
        assert "✅ No expired entries" in capsys.readouterr().out

    def test_fetcher_is_closed(self, run_cli, mock_github_client):
        run_cli("sweep")

        mock_github_client.close.assert_awaited_once()

    def test_languages(self, capsys, tmp_path, monkeypatch):
        monkeypatch.setenv(config_module.CONFIG_ENV_VAR, str(tmp_path / "missing.yml"))
        reset_config()
        try:
            code = main(["languages"])
        finally:
            reset_config()

        out = capsys.readouterr().out
        assert code == 0
        assert "Supported languages (20)" in out
        assert "Python" in out

    def test_no_command_prints_help(self, capsys):
        assert main([]) == 0
        assert "usage:" in capsys.readouterr().out

    def test_parser_requires_language(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["random"])
