"""Tests for the run_agent command line entry point."""

import pytest
import yaml

import logging_config
import run_agent

OWNER = "0xA11CE"
UNIT = 10**18


@pytest.fixture(autouse=True)
def quiet_logging(monkeypatch):
    """Keep the CLI from replacing pytest's log handlers."""
    for name in ("setup", "setup_minimal", "setup_debug"):
        monkeypatch.setattr(logging_config, name, lambda *args, **kwargs: None)


@pytest.fixture
def config_file(tmp_path):
    data = {
        "owner": OWNER,
        "venue_a": {"name": "VenueA", "rates": {"WETH/USDC": "2040", "WETH/DAI": "2000", "USDC/DAI": "1"}},
        "venue_b": {"name": "VenueB", "rates": {"WETH/USDC": "2000", "WETH/DAI": "2000", "USDC/DAI": "1"}},
        "min_profit_bps": 50,
        "tokens": {"WETH": {"approved": True}, "USDC": {"approved": True}, "DAI": {"approved": True}},
        "paper_balances": {"WETH": 10 * UNIT},
    }
    path = tmp_path / "agent.yaml"
    path.write_text(yaml.safe_dump(data))
    return path


def test_scan_prints_table(config_file, capsys):
    exit_code = run_agent.main(["--config", str(config_file), "scan", "--tokens", "WETH", "USDC", "DAI"])

    out = capsys.readouterr().out
    assert exit_code == 0
    assert "WETH" in out and "USDC" in out
    assert "+2.00%" in out


def test_scan_defaults_to_approved_tokens(config_file, capsys):
    assert run_agent.main(["--config", str(config_file), "scan"]) == 0
    assert "+2.00%" in capsys.readouterr().out


def test_scan_nothing_found(config_file, capsys):
    assert run_agent.main(["--config", str(config_file), "scan", "--tokens", "WETH", "DAI"]) == 0
    assert "No opportunities" in capsys.readouterr().out


def test_execute_as_owner(config_file, capsys):
    exit_code = run_agent.main(
        [
            "--config", str(config_file), "execute",
            "--caller", OWNER, "--token0", "WETH", "--token1", "USDC", "--amount", str(UNIT),
        ]
    )

    out = capsys.readouterr().out
    assert exit_code == 0
    assert "VenueA" in out and "VenueB" in out
    assert f"Realized net profit: {2 * 10**16} WETH" in out


def test_execute_rejected(config_file, capsys):
    exit_code = run_agent.main(
        [
            "--config", str(config_file), "execute",
            "--caller", "0xB0B", "--token0", "WETH", "--token1", "USDC", "--amount", str(UNIT),
        ]
    )

    assert exit_code == 2
    assert "Rejected" in capsys.readouterr().err


def test_missing_config(tmp_path, capsys):
    assert run_agent.main(["--config", str(tmp_path / "nope.yaml"), "scan"]) == 1
    assert "Config error" in capsys.readouterr().err
