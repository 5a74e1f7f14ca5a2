"""CLI flows via Typer's CliRunner against a temp database."""

import pytest
from typer.testing import CliRunner

from predoracle.cli import app as cli_app

runner = CliRunner()


@pytest.fixture(autouse=True)
def _quiet_logging(monkeypatch):
    monkeypatch.setattr(cli_app, "configure_logging", lambda settings: None)


def _config_dir(tmp_path, liveness):
    conf = tmp_path / "config"
    conf.mkdir()
    db = (tmp_path / "oracle.duckdb").as_posix()
    (conf / "default.toml").write_text(
        f'[oracle]\nauthority = "auth"\nbond_amount = 10\nliveness_period_sec = {liveness}\n'
        f'[storage]\ndb_path = "{db}"\n'
    )
    return conf


def _invoke(conf, *args):
    return runner.invoke(cli_app.app, ["--config-dir", str(conf), *args])


def test_optimistic_flow(tmp_path):
    conf = _config_dir(tmp_path, liveness=0)
    result = _invoke(conf, "oracle", "init")
    assert result.exit_code == 0, result.output
    assert "Authority: auth" in result.output

    assert _invoke(conf, "ledger", "deposit", "alice", "100").exit_code == 0
    result = _invoke(conf, "event", "create", "Will it rain in Paris tomorrow?", "--as", "alice", "--market", "m-1")
    assert result.exit_code == 0, result.output
    assert "Event id: 1" in result.output

    result = _invoke(
        conf, "proposal", "propose", "1", "--outcome", "yes", "--as", "alice",
        "--evidence", "Meteo report", "--source", "https://meteo.example",
    )
    assert result.exit_code == 0, result.output
    assert "Proposal id: 1" in result.output

    result = _invoke(conf, "ledger", "balance", "alice")
    assert "reserved=10" in result.output and "available=90" in result.output

    result = _invoke(conf, "proposal", "resolve", "1", "--outcome", "yes", "--as", "bob")
    assert result.exit_code == 0, result.output
    assert "resolved: yes" in result.output

    result = _invoke(conf, "proposal", "withdraw", "1", "--as", "alice")
    assert result.exit_code == 0, result.output
    assert "Released 10 to alice" in result.output

    result = _invoke(conf, "proposal", "withdraw", "1", "--as", "alice")
    assert result.exit_code == 1
    assert "insufficient_bond" in result.output

    result = _invoke(conf, "oracle", "status")
    assert "Active proposals: 0  Total resolved: 1" in result.output

    result = _invoke(conf, "log", "list")
    assert "proposal_resolved" in result.output


def test_dispute_flow_errors(tmp_path):
    conf = _config_dir(tmp_path, liveness=3600)
    _invoke(conf, "oracle", "init")
    _invoke(conf, "ledger", "deposit", "alice", "100")
    _invoke(conf, "ledger", "deposit", "bob", "100")
    _invoke(conf, "event", "create", "Final score over 2.5 goals?", "--as", "alice")
    _invoke(conf, "proposal", "propose", "1", "--outcome", "no", "--as", "alice", "--evidence-hash", "ab" * 32)

    result = _invoke(conf, "proposal", "dispute", "1", "--as", "bob", "--evidence", "Box score shows 3 goals")
    assert result.exit_code == 0, result.output
    assert "disputed by bob" in result.output

    result = _invoke(conf, "proposal", "resolve", "1", "--outcome", "yes", "--as", "auth")
    assert result.exit_code == 1
    assert "liveness_still_open" in result.output

    result = _invoke(conf, "proposal", "list", "--state", "disputed")
    assert "Total: 1 proposals" in result.output

    result = _invoke(conf, "oracle", "init")
    assert result.exit_code == 1
    assert "already_initialized" in result.output


def test_bad_inputs(tmp_path):
    conf = _config_dir(tmp_path, liveness=0)
    _invoke(conf, "oracle", "init")
    result = _invoke(conf, "event", "create", "x" * 300, "--as", "alice")
    assert result.exit_code == 1
    assert "invalid_event" in result.output

    _invoke(conf, "event", "create", "Pick one", "--as", "alice", "--type", "multi_choice", "--option", "a", "--option", "b")
    _invoke(conf, "ledger", "deposit", "alice", "100")
    result = _invoke(conf, "proposal", "propose", "1", "--outcome", "yes", "--as", "alice", "--evidence-hash", "ab" * 32)
    assert result.exit_code == 1
    assert "resolution_mismatch" in result.output

    result = _invoke(conf, "proposal", "propose", "1", "--outcome", "maybe", "--as", "alice", "--evidence-hash", "ab" * 32)
    assert result.exit_code != 0
