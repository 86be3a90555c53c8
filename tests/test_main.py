"""Tests for the release-report command line entry point."""

import json

import pytest

from conftest import make_record
from release_report import main
from release_report.agent import github_commits, summary_composer
from release_report.models.report_payload import ReportSummary


@pytest.fixture
def configured_env(monkeypatch):
    monkeypatch.setenv("GITHUB_REPO", "octo-org/octo-repo")
    monkeypatch.setenv("GITHUB_TOKEN", "gh-test-token")
    monkeypatch.setenv("OPENAI_API_KEY", "sk-test")
    monkeypatch.setenv("OPENAI_MODEL", "openai/gpt-4o-mini")
    monkeypatch.delenv("REPORT_TIMEOUT_SECONDS", raising=False)
    monkeypatch.delenv("REPORT_MAX_WINDOW_DAYS", raising=False)

    async def fake_fetch(repo, token, window, **kwargs):
        return [make_record("c1", "Add dark mode")]

    async def fake_compose(repo, window, commits, **kwargs):
        return ReportSummary(html="<section>shipped</section>")

    monkeypatch.setattr(github_commits, "fetch_commits", fake_fetch)
    monkeypatch.setattr(summary_composer, "compose_summary", fake_compose)


def test_prints_report_json(configured_env, capsys):
    exit_code = main.main(["2025-01-01", "2025-01-07"])

    assert exit_code == 0
    body = json.loads(capsys.readouterr().out)
    assert body["repo"] == "octo-org/octo-repo"
    assert body["summary_html"] == "<section>shipped</section>"
    assert body["meta"]["commit_count"] == 1
    assert body["meta"]["model"] == "gpt-4o-mini"


def test_reports_errors_with_status(configured_env, capsys):
    exit_code = main.main(["2025-01-08", "2025-01-07"])

    assert exit_code == 1
    captured = capsys.readouterr()
    assert captured.out == ""
    assert "[400] Start date cannot be after end date." in captured.err.splitlines()


def test_bad_settings_are_reported_without_traceback(configured_env, monkeypatch, capsys):
    monkeypatch.setenv("REPORT_MAX_WINDOW_DAYS", "a month")

    exit_code = main.main(["2025-01-01", "2025-01-07"])

    assert exit_code == 1
    assert "[500] Report settings are invalid: max_window_days." in (
        capsys.readouterr().err.splitlines()
    )
