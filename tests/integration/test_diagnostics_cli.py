from __future__ import annotations

import pytest

from charmline.apps import diagnostics_cli


@pytest.fixture(autouse=True)
def _no_provider_keys(monkeypatch):
    for key in ("OPENAI_API_KEY", "ANTHROPIC_API_KEY", "HF_TOKEN", "CHARMLINE_CONFIG_FILE"):
        monkeypatch.delenv(key, raising=False)


def test_diag_validate_config_output(monkeypatch, capsys):
    monkeypatch.setattr("sys.argv", ["charmline-diag", "--validate-config"])
    rc = diagnostics_cli.main()
    out = capsys.readouterr().out
    assert rc == 0
    assert "config-valid instance=charmline" in out
    assert "max_retries=3" in out


def test_diag_lists_configured_providers(monkeypatch, capsys):
    monkeypatch.setenv("ANTHROPIC_API_KEY", "ak-test")
    monkeypatch.setattr("sys.argv", ["charmline-diag", "--list-providers"])
    rc = diagnostics_cli.main()
    out = capsys.readouterr().out
    assert rc == 0
    assert "- anthropic: priority=2 model=claude-3-haiku-20240307" in out
    assert "openai" not in out


def test_diag_check_providers_without_keys(monkeypatch, capsys):
    monkeypatch.setattr("sys.argv", ["charmline-diag", "--check-providers"])
    rc = diagnostics_cli.main()
    out = capsys.readouterr().out
    assert rc == 0
    assert "provider-health:" in out
    assert "- none" in out


def test_diag_reports_invalid_config(monkeypatch, capsys, tmp_path):
    bad = tmp_path / "bad.yaml"
    bad.write_text("runtime:\n  max_retries: 0\n", encoding="utf-8")
    monkeypatch.setattr("sys.argv", ["charmline-diag", "--config", str(bad), "--validate-config"])
    rc = diagnostics_cli.main()
    out = capsys.readouterr().out
    assert rc == 1
    assert "config-invalid" in out
