"""Configuration loading and deterministic merge order."""

from __future__ import annotations

import tomllib
from dataclasses import dataclass
from pathlib import Path

from workspace_context.context.models import ContextBudget, OversizePolicy, SegmentLimits
from workspace_context.workspace.boundary import BoundaryRules

CONFIG_FILE_NAME = "workspace_context.toml"
DATA_DIR_NAME = ".workspace_context"

MAX_PER_FILE_BYTES_CAP = 1024 * 1024
MAX_PER_FILE_TOKENS_CAP = 262_144
MAX_TOTAL_BYTES_CAP = 4 * 1024 * 1024
MAX_TOTAL_TOKENS_CAP = 1_000_000
MAX_SEGMENT_TOKENS_CAP = 262_144
MAX_SEGMENT_BYTES_CAP = 4 * 1024 * 1024
MAX_LOADER_BYTES_CAP = 16 * 1024 * 1024
MAX_WORKERS_CAP = 32

_RELAXING_BOUNDARY_FIELDS = ("allow_names", "allow_file_names", "allow_extensions")


@dataclass(slots=True, frozen=True)
class LoaderConfig:
    """File loading limits."""

    max_file_bytes: int = 1_000_000
    max_workers: int = 4


@dataclass(slots=True, frozen=True)
class WorkspaceConfig:
    """Fully merged workspace configuration."""

    root: Path
    data_dir: Path
    budget: ContextBudget
    segments: SegmentLimits
    boundary: BoundaryRules
    loader: LoaderConfig

    def to_public_dict(self) -> dict[str, object]:
        """Return serializable config snapshot."""
        return {
            "root": str(self.root),
            "data_dir": str(self.data_dir),
            "budget": {
                "max_per_file_bytes": self.budget.max_per_file_bytes,
                "max_per_file_tokens": self.budget.max_per_file_tokens,
                "max_total_bytes": self.budget.max_total_bytes,
                "max_total_tokens": self.budget.max_total_tokens,
                "oversize_bytes": str(self.budget.oversize_bytes),
                "oversize_tokens": str(self.budget.oversize_tokens),
            },
            "segments": {
                "max_tokens_per_segment": self.segments.max_tokens_per_segment,
                "max_bytes_per_segment": self.segments.max_bytes_per_segment,
            },
            "boundary": {
                "excluded_names": sorted(self.boundary.excluded_names),
                "excluded_file_names": sorted(self.boundary.excluded_file_names),
                "excluded_extensions": sorted(self.boundary.excluded_extensions),
                "include_hidden": self.boundary.include_hidden,
            },
            "loader": {
                "max_file_bytes": self.loader.max_file_bytes,
                "max_workers": self.loader.max_workers,
            },
        }


@dataclass(slots=True, frozen=True)
class ConfigOverrides:
    """Optional caller overrides applied at highest precedence."""

    data_dir: Path | None = None
    max_per_file_bytes: int | None = None
    max_per_file_tokens: int | None = None
    max_total_bytes: int | None = None
    max_total_tokens: int | None = None
    oversize_bytes: str | None = None
    oversize_tokens: str | None = None
    max_tokens_per_segment: int | None = None
    max_bytes_per_segment: int | None = None
    include_hidden: bool | None = None


def default_config(root: Path) -> WorkspaceConfig:
    """Build default config for a given workspace root."""
    resolved_root = root.resolve()
    return WorkspaceConfig(
        root=resolved_root,
        data_dir=resolved_root / DATA_DIR_NAME,
        budget=ContextBudget(),
        segments=SegmentLimits(),
        boundary=BoundaryRules(),
        loader=LoaderConfig(),
    )


def load_workspace_config_file(root: Path) -> dict[str, object]:
    """Load optional workspace_context.toml from the workspace root."""
    config_path = root / CONFIG_FILE_NAME
    if not config_path.exists():
        return {}
    with config_path.open("rb") as handle:
        payload = tomllib.load(handle)
    if not isinstance(payload, dict):
        raise ValueError(f"{CONFIG_FILE_NAME} must contain a top-level table.")
    return payload


def _get_table(payload: dict[str, object], key: str) -> dict[str, object]:
    value = payload.get(key, {})
    if not isinstance(value, dict):
        raise ValueError(f"Config section '{key}' must be a table.")
    return value


def _tuple_of_strings(value: object, section: str, field: str) -> tuple[str, ...]:
    if not isinstance(value, list):
        raise ValueError(f"Config field '{section}.{field}' must be a list of strings.")
    output: list[str] = []
    for item in value:
        if not isinstance(item, str):
            raise ValueError(f"Config field '{section}.{field}' must contain only strings.")
        output.append(item)
    return tuple(output)


def merge_config(
    base: WorkspaceConfig, payload: dict[str, object], overrides: ConfigOverrides
) -> WorkspaceConfig:
    """Merge defaults, workspace config, then caller overrides."""
    budget_payload = _get_table(payload, "budget")
    segments_payload = _get_table(payload, "segments")
    boundary_payload = _get_table(payload, "boundary")
    loader_payload = _get_table(payload, "loader")

    for field in _RELAXING_BOUNDARY_FIELDS:
        if field in boundary_payload:
            raise ValueError(
                f"Config field 'boundary.{field}' is not supported; "
                "default boundary exclusions cannot be relaxed."
            )

    budget = _merge_budget(
        base.budget,
        prefix="budget",
        max_per_file_bytes=budget_payload.get("max_per_file_bytes"),
        max_per_file_tokens=budget_payload.get("max_per_file_tokens"),
        max_total_bytes=budget_payload.get("max_total_bytes"),
        max_total_tokens=budget_payload.get("max_total_tokens"),
        oversize_bytes=budget_payload.get("oversize_bytes"),
        oversize_tokens=budget_payload.get("oversize_tokens"),
    )
    segments = _merge_segments(
        base.segments,
        prefix="segments",
        max_tokens_per_segment=segments_payload.get("max_tokens_per_segment"),
        max_bytes_per_segment=segments_payload.get("max_bytes_per_segment"),
    )

    boundary = base.boundary.extended(
        names=_optional_strings(boundary_payload, "boundary", "exclude_names"),
        file_names=_optional_strings(boundary_payload, "boundary", "exclude_file_names"),
        extensions=_optional_strings(boundary_payload, "boundary", "exclude_extensions"),
    )
    if "include_hidden" in boundary_payload:
        boundary = _with_include_hidden(
            boundary, boundary_payload["include_hidden"], "boundary.include_hidden"
        )

    loader = LoaderConfig(
        max_file_bytes=_optional_positive_int_with_cap(
            loader_payload.get("max_file_bytes"),
            "loader.max_file_bytes",
            base.loader.max_file_bytes,
            MAX_LOADER_BYTES_CAP,
        ),
        max_workers=_optional_positive_int_with_cap(
            loader_payload.get("max_workers"),
            "loader.max_workers",
            base.loader.max_workers,
            MAX_WORKERS_CAP,
        ),
    )

    merged = WorkspaceConfig(
        root=base.root,
        data_dir=base.data_dir,
        budget=budget,
        segments=segments,
        boundary=boundary,
        loader=loader,
    )
    return apply_overrides(merged, overrides)


def apply_overrides(config: WorkspaceConfig, overrides: ConfigOverrides) -> WorkspaceConfig:
    """Apply caller overrides at highest precedence."""
    budget = _merge_budget(
        config.budget,
        prefix="overrides",
        max_per_file_bytes=overrides.max_per_file_bytes,
        max_per_file_tokens=overrides.max_per_file_tokens,
        max_total_bytes=overrides.max_total_bytes,
        max_total_tokens=overrides.max_total_tokens,
        oversize_bytes=overrides.oversize_bytes,
        oversize_tokens=overrides.oversize_tokens,
    )
    segments = _merge_segments(
        config.segments,
        prefix="overrides",
        max_tokens_per_segment=overrides.max_tokens_per_segment,
        max_bytes_per_segment=overrides.max_bytes_per_segment,
    )
    boundary = config.boundary
    if overrides.include_hidden is not None:
        boundary = _with_include_hidden(
            boundary, overrides.include_hidden, "overrides.include_hidden"
        )
    data_dir = overrides.data_dir or config.data_dir
    return WorkspaceConfig(
        root=config.root,
        data_dir=data_dir.resolve(),
        budget=budget,
        segments=segments,
        boundary=boundary,
        loader=config.loader,
    )


def load_effective_config(root: Path, overrides: ConfigOverrides | None = None) -> WorkspaceConfig:
    """Load effective config using merge order defaults -> workspace file -> overrides."""
    resolved_root = root.resolve()
    base = default_config(resolved_root)
    payload = load_workspace_config_file(resolved_root)
    return merge_config(base, payload, overrides or ConfigOverrides())


def _merge_budget(
    base: ContextBudget,
    *,
    prefix: str,
    max_per_file_bytes: object,
    max_per_file_tokens: object,
    max_total_bytes: object,
    max_total_tokens: object,
    oversize_bytes: object,
    oversize_tokens: object,
) -> ContextBudget:
    return ContextBudget(
        max_per_file_bytes=_optional_positive_int_with_cap(
            max_per_file_bytes,
            f"{prefix}.max_per_file_bytes",
            base.max_per_file_bytes,
            MAX_PER_FILE_BYTES_CAP,
        ),
        max_per_file_tokens=_optional_positive_int_with_cap(
            max_per_file_tokens,
            f"{prefix}.max_per_file_tokens",
            base.max_per_file_tokens,
            MAX_PER_FILE_TOKENS_CAP,
        ),
        max_total_bytes=_optional_positive_int_with_cap(
            max_total_bytes,
            f"{prefix}.max_total_bytes",
            base.max_total_bytes,
            MAX_TOTAL_BYTES_CAP,
        ),
        max_total_tokens=_optional_positive_int_with_cap(
            max_total_tokens,
            f"{prefix}.max_total_tokens",
            base.max_total_tokens,
            MAX_TOTAL_TOKENS_CAP,
        ),
        oversize_bytes=_optional_policy(
            oversize_bytes, f"{prefix}.oversize_bytes", base.oversize_bytes
        ),
        oversize_tokens=_optional_policy(
            oversize_tokens, f"{prefix}.oversize_tokens", base.oversize_tokens
        ),
    )


def _merge_segments(
    base: SegmentLimits,
    *,
    prefix: str,
    max_tokens_per_segment: object,
    max_bytes_per_segment: object,
) -> SegmentLimits:
    return SegmentLimits(
        max_tokens_per_segment=_optional_positive_int_with_cap(
            max_tokens_per_segment,
            f"{prefix}.max_tokens_per_segment",
            base.max_tokens_per_segment,
            MAX_SEGMENT_TOKENS_CAP,
        ),
        max_bytes_per_segment=_optional_positive_int_with_cap(
            max_bytes_per_segment,
            f"{prefix}.max_bytes_per_segment",
            base.max_bytes_per_segment,
            MAX_SEGMENT_BYTES_CAP,
        ),
    )


def _optional_strings(payload: dict[str, object], section: str, field: str) -> tuple[str, ...]:
    if field not in payload:
        return ()
    return _tuple_of_strings(payload[field], section, field)


def _with_include_hidden(rules: BoundaryRules, value: object, name: str) -> BoundaryRules:
    if not isinstance(value, bool):
        raise ValueError(f"Config field '{name}' must be a boolean.")
    return BoundaryRules(
        excluded_names=rules.excluded_names,
        excluded_file_names=rules.excluded_file_names,
        excluded_extensions=rules.excluded_extensions,
        include_hidden=value,
    )


def _optional_policy(value: object, name: str, default: OversizePolicy) -> OversizePolicy:
    if value is None:
        return default
    if not isinstance(value, str):
        raise ValueError(f"Config field '{name}' must be one of: exclude, truncate.")
    try:
        return OversizePolicy(value)
    except ValueError as exc:
        raise ValueError(f"Config field '{name}' must be one of: exclude, truncate.") from exc


def _optional_positive_int_with_cap(
    value: object,
    name: str,
    default: int,
    cap: int | None,
) -> int:
    if value is None:
        return default
    if not isinstance(value, int) or isinstance(value, bool) or value < 1:
        raise ValueError(f"Config field '{name}' must be a positive integer.")
    if cap is not None and value > cap:
        raise ValueError(f"Config field '{name}' must be <= {cap}.")
    return value
