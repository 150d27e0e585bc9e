from __future__ import annotations

import logging

import pytest

from orchestrator.router import RouterError, resolve


def test_default_resolution_comes_from_config():
    resolved = resolve("day07", "solver", "dev", {})
    assert resolved.impl_id == "baseline"
    assert resolved.module_id == "day07:solver/baseline"
    assert resolved.decision_source == "config"
    assert resolved.fallback_used is False
    assert resolved.contracts == "SolveResult"
    assert resolved.module_path.name == "__init__.py"


def test_profile_block_is_merged_into_policy():
    resolved = resolve("day07", "solver", "example", {})
    assert resolved.config["workers"] == 2
    assert resolved.config["base_offset"] == 0


def test_env_and_cli_select_implementation():
    from_env = resolve("day07", "printer", "dev", {"puzzle_printer_impl": "baseline"})
    assert from_env.decision_source == "env"

    both = {"PUZZLE_PRINTER_IMPL": "other", "CLI_PUZZLE_PRINTER_IMPL": "baseline"}
    assert resolve("day07", "printer", "dev", both).decision_source == "cli"


def test_missing_implementation_falls_back(caplog):
    with caplog.at_level(logging.WARNING, logger="orchestrator.router"):
        resolved = resolve("day07", "solver", "dev", {"PUZZLE_SOLVER_IMPL": "missing"})
    assert resolved.impl_id == "baseline"
    assert resolved.fallback_used is True
    assert resolved.decision_source == "fallback"
    assert "missing" in caplog.text


def test_unsupported_role_is_rejected():
    with pytest.raises(RouterError):
        resolve("day07", "generator", "dev", {})


def test_unknown_puzzle_is_rejected():
    with pytest.raises(RouterError):
        resolve("day99", "solver", "dev", {})
