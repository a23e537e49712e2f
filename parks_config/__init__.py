"""
parks_config -- single public entrypoint for analytics configuration.

Responsibility:
    Provides the way to obtain configuration at runtime through
    ``get_active_config()``.  Services receive the resulting
    ``AnalyticsConfig`` and translate it into engine inputs; engines never
    read configuration.

Architecture position:
    Configuration -- sits above ``parks_kernel`` and ``parks_engines`` and
    below ``parks_modules``.  The kernel MUST NEVER import from
    ``parks_config``.

Invariants enforced:
    - Deterministic: the same YAML always produces the same checksum.
    - Validation at load: malformed files never produce a config.

Failure modes:
    - ``FileNotFoundError`` -- the requested file does not exist.
    - ``InvalidConfigError`` -- invalid YAML or invalid values.

Audit relevance:
    Every successful ``get_active_config()`` call emits a
    ``PARKS_CONFIG_TRACE`` log entry with the config_id, version and
    checksum, tying every report to the configuration that produced it.
"""

from __future__ import annotations

from pathlib import Path

from parks_config.loader import compute_checksum, load_yaml_file, parse_config
from parks_config.schema import AnalyticsConfig, ProjectionDefaults
from parks_kernel.logging_config import get_logger

_logger = get_logger("config")

DEFAULT_CONFIG_PATH = Path(__file__).parent / "defaults.yaml"


def get_active_config(path: Path | str | None = None) -> AnalyticsConfig:
    """Load, validate and return the analytics configuration.

    Args:
        path: YAML file to load.  Defaults to ``parks_config/defaults.yaml``.

    Raises:
        FileNotFoundError: If ``path`` does not exist.
        InvalidConfigError: If the file fails to parse or validate.
    """
    source = Path(path) if path is not None else DEFAULT_CONFIG_PATH
    config = parse_config(load_yaml_file(source), source=str(source))

    _logger.info(
        "PARKS_CONFIG_TRACE",
        extra={
            "trace_type": "PARKS_CONFIG_TRACE",
            "config_id": config.config_id,
            "config_version": config.version,
            "checksum": config.checksum,
            "source": str(source),
        },
    )
    return config


__all__ = [
    "AnalyticsConfig",
    "DEFAULT_CONFIG_PATH",
    "ProjectionDefaults",
    "compute_checksum",
    "get_active_config",
    "load_yaml_file",
    "parse_config",
]
