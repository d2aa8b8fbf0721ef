from __future__ import annotations

from pathlib import Path

from workspace_context.config import ConfigOverrides, load_effective_config
from workspace_context.context import OversizePolicy


def test_merge_order_defaults_then_file_then_overrides(tmp_path: Path) -> None:
    (tmp_path / "workspace_context.toml").write_text(
        "\n".join(
            [
                "[budget]",
                "max_per_file_bytes = 1000",
                "max_total_tokens = 500",
                'oversize_bytes = "truncate"',
                "",
                "[segments]",
                "max_tokens_per_segment = 100",
            ]
        ),
        encoding="utf-8",
    )
    overrides = ConfigOverrides(max_per_file_bytes=2000, max_bytes_per_segment=4096)

    config = load_effective_config(tmp_path, overrides)

    assert config.budget.max_per_file_bytes == 2000
    assert config.budget.max_total_tokens == 500
    assert config.budget.max_per_file_tokens == 8000
    assert config.budget.oversize_bytes is OversizePolicy.TRUNCATE
    assert config.budget.oversize_tokens is OversizePolicy.EXCLUDE
    assert config.segments.max_tokens_per_segment == 100
    assert config.segments.max_bytes_per_segment == 4096


def test_defaults_without_config_file(tmp_path: Path) -> None:
    config = load_effective_config(tmp_path)

    assert config.root == tmp_path.resolve()
    assert config.data_dir == tmp_path.resolve() / ".workspace_context"
    assert config.budget.max_total_bytes == 225280
    assert config.segments.max_bytes_per_segment == 65536
    assert config.loader.max_workers == 4


def test_data_dir_override_has_highest_precedence(tmp_path: Path) -> None:
    custom_data_dir = tmp_path / ".custom_data"
    config = load_effective_config(tmp_path, ConfigOverrides(data_dir=custom_data_dir))

    assert config.to_public_dict()["data_dir"] == str(custom_data_dir.resolve())


def test_boundary_exclusions_only_extend_defaults(tmp_path: Path) -> None:
    (tmp_path / "workspace_context.toml").write_text(
        "\n".join(
            [
                "[boundary]",
                'exclude_names = ["vendor"]',
                'exclude_extensions = [".LOG"]',
                "include_hidden = true",
            ]
        ),
        encoding="utf-8",
    )

    config = load_effective_config(tmp_path)

    assert "vendor" in config.boundary.excluded_names
    assert ".git" in config.boundary.excluded_names
    assert "log" in config.boundary.excluded_extensions
    assert "png" in config.boundary.excluded_extensions
    assert config.boundary.include_hidden is True
