"""Metric catalog and node parameter loading from validated YAML files."""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass
from importlib import resources
from importlib.resources.abc import Traversable
from pathlib import Path
from typing import Any

import yaml
from jsonschema import ValidationError, validators

from pcdriver.core.errors import CatalogLoadError, CatalogValidationError, ParameterError
from pcdriver.core.metrics import METRIC_NAMES
from pcdriver.core.model import DriverParameter, MetricDescriptor, parameter_from_mapping

LOGGER = logging.getLogger(__name__)

DRIVER_MODES = ("metrics", "network")


class UniqueKeyLoader(yaml.SafeLoader):
    """YAML loader that rejects duplicate mapping keys."""


def _construct_mapping(loader: UniqueKeyLoader, node: yaml.Node, deep: bool = False) -> dict[str, Any]:
    mapping: dict[str, Any] = {}
    for key_node, value_node in node.value:
        key = loader.construct_object(key_node, deep=deep)
        if key in mapping:
            raise yaml.constructor.ConstructorError(
                None, None, f"duplicate key '{key}'", key_node.start_mark
            )
        mapping[key] = loader.construct_object(value_node, deep=deep)
    return mapping


UniqueKeyLoader.add_constructor(
    yaml.resolver.BaseResolver.DEFAULT_MAPPING_TAG,
    _construct_mapping,
)


@dataclass(frozen=True)
class LoadedCatalog:
    metrics: tuple[MetricDescriptor, ...]
    warnings: tuple[str, ...]


@dataclass(frozen=True)
class LoadedParameter:
    parameter: DriverParameter
    mode: str | None = None


def _load_schema_validator(name: str) -> Any:
    schema_text = resources.files("pcdriver.schemas").joinpath(name).read_text(encoding="utf-8")
    schema = json.loads(schema_text)
    validator_cls = validators.validator_for(schema)
    validator_cls.check_schema(schema)
    return validator_cls(schema)


def _user_catalog_path() -> Path:
    xdg_config = Path(os.environ.get("XDG_CONFIG_HOME", Path.home() / ".config"))
    return xdg_config / "pcdriver/metrics.yaml"


def _read_yaml(
    path: Path | Traversable,
    *,
    read_error: type[Exception] = CatalogLoadError,
    invalid_error: type[Exception] = CatalogValidationError,
) -> dict[str, Any]:
    try:
        content = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise read_error(f"Could not read {path}: {exc}") from exc

    try:
        loaded = yaml.load(content, Loader=UniqueKeyLoader)
    except yaml.YAMLError as exc:
        raise invalid_error(f"Invalid YAML in {path}: {exc}") from exc

    if not isinstance(loaded, dict):
        raise invalid_error(f"File {path} must contain a mapping at root")
    return loaded


def _validate(doc: dict[str, Any], schema: str, source: Path | Traversable, error: type[Exception]) -> None:
    validator = _load_schema_validator(schema)
    try:
        validator.validate(doc)
    except ValidationError as exc:
        path = ".".join(str(p) for p in exc.path)
        where = f" ({path})" if path else ""
        raise error(f"Schema validation failed for {source}{where}: {exc.message}") from exc


def _build_metrics(doc: dict[str, Any], source: Path | Traversable) -> list[MetricDescriptor]:
    _validate(doc, "catalog.schema.json", source, CatalogValidationError)

    metrics: list[MetricDescriptor] = []
    seen: set[str] = set()
    for entry in doc["metrics"]:
        metric_id = entry["id"]
        if metric_id not in METRIC_NAMES:
            available = ", ".join(METRIC_NAMES)
            raise CatalogValidationError(
                f"Unknown metric '{metric_id}' in {source}. Available: {available}"
            )
        if metric_id in seen:
            raise CatalogValidationError(f"Duplicate metric '{metric_id}' in {source}")
        seen.add(metric_id)
        metrics.append(
            MetricDescriptor(
                id=metric_id,
                name=entry["name"],
                type=entry["type"],
                unit=entry.get("unit"),
                unit_name=entry.get("unit_name"),
            )
        )
    return metrics


def load_catalog() -> LoadedCatalog:
    """Load the packaged metric catalog, applying the user catalog on top.

    User entries replace packaged entries with the same id but keep the
    packaged order.
    """
    packaged_path = resources.files("pcdriver.catalog").joinpath("metrics.yaml")
    metrics = _build_metrics(_read_yaml(packaged_path), packaged_path)
    warnings: list[str] = []

    user_path = _user_catalog_path()
    if user_path.is_file():
        overrides = {m.id: m for m in _build_metrics(_read_yaml(user_path), user_path)}
        for index, metric in enumerate(metrics):
            override = overrides.pop(metric.id, None)
            if override is None:
                continue
            warning = f"User catalog overrides metric '{metric.id}'"
            LOGGER.warning(warning)
            warnings.append(warning)
            metrics[index] = override
        # Ids known to the source but absent from the packaged catalog.
        metrics.extend(overrides.values())

    return LoadedCatalog(metrics=tuple(metrics), warnings=tuple(warnings))


def _env_overrides() -> dict[str, Any]:
    overrides: dict[str, Any] = {}
    if "PCDRIVER_TIMEOUT" in os.environ:
        overrides["timeout"] = os.environ["PCDRIVER_TIMEOUT"]
    if "PCDRIVER_RETRIEVE_STATUS" in os.environ:
        overrides["retrieve_status"] = os.environ["PCDRIVER_RETRIEVE_STATUS"]
    return overrides


def load_parameter(path: Path | None = None) -> LoadedParameter:
    """Load node parameters from an optional YAML file plus environment overrides."""
    raw: dict[str, Any] = {}
    if path is not None:
        raw = _read_yaml(path, read_error=ParameterError, invalid_error=ParameterError)
        _validate(raw, "parameter.schema.json", path, ParameterError)

    mode = raw.get("mode")
    parameter = parameter_from_mapping(raw)
    env = _env_overrides()
    if env:
        parameter = parameter_from_mapping(
            {
                "timeout": env.get("timeout", parameter.timeout_ms),
                "retrieve_status": env.get("retrieve_status", parameter.retrieve_status),
            }
        )
        LOGGER.debug("Environment overrides applied: %s", sorted(env))
    return LoadedParameter(parameter=parameter, mode=mode)
