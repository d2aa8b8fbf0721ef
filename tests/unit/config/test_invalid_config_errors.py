from __future__ import annotations

from pathlib import Path

import pytest

from workspace_context.config import ConfigOverrides, load_effective_config


def _write_config(root: Path, lines: list[str]) -> None:
    (root / "workspace_context.toml").write_text("\n".join(lines), encoding="utf-8")


def test_invalid_limit_type_raises_value_error(tmp_path: Path) -> None:
    _write_config(tmp_path, ["[budget]", 'max_total_bytes = "not-an-int"'])

    with pytest.raises(ValueError, match="budget.max_total_bytes"):
        load_effective_config(tmp_path)


def test_invalid_section_type_raises_value_error(tmp_path: Path) -> None:
    _write_config(tmp_path, ['budget = "not-a-table"'])

    with pytest.raises(ValueError, match="section 'budget'"):
        load_effective_config(tmp_path)


def test_unknown_oversize_policy_is_rejected(tmp_path: Path) -> None:
    _write_config(tmp_path, ["[budget]", 'oversize_tokens = "shrink"'])

    with pytest.raises(ValueError, match="budget.oversize_tokens"):
        load_effective_config(tmp_path)


def test_relaxing_boundary_is_rejected(tmp_path: Path) -> None:
    _write_config(tmp_path, ["[boundary]", 'allow_names = [".git"]'])

    with pytest.raises(ValueError, match="boundary.allow_names"):
        load_effective_config(tmp_path)


def test_non_boolean_include_hidden_is_rejected(tmp_path: Path) -> None:
    _write_config(tmp_path, ["[boundary]", 'include_hidden = "yes"'])

    with pytest.raises(ValueError, match="boundary.include_hidden"):
        load_effective_config(tmp_path)


def test_zero_segment_limit_override_is_rejected(tmp_path: Path) -> None:
    with pytest.raises(ValueError, match="overrides.max_tokens_per_segment"):
        load_effective_config(tmp_path, ConfigOverrides(max_tokens_per_segment=0))
