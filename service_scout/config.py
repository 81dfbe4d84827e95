# === FILE: service_scout/config.py ===
"""
Loading and validation of ServiceScout configuration.

Pydantic describes the schema; every model is frozen, and the resulting
:class:`ScoutConfig` value is passed explicitly into each component.
"""
from __future__ import annotations

import errno
import json
import os
import re
from pathlib import Path
from typing import Any, Dict, List, Literal, Tuple, Union

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from service_scout.rules import (
    DEFAULT_EXCLUDE_RULES,
    DEFAULT_SERVICE_RULES,
    DEFAULT_SOFT404_BODY_RULES,
    DEFAULT_SOFT404_TITLE_RULES,
    Rule,
    compile_rules,
)
from service_scout.utils import GOVERNMENT_SUFFIXES

__all__ = [
    "RuleSpec",
    "RuleSettings",
    "AuditSettings",
    "DiscoverySettings",
    "ScoutConfig",
    "load_config",
    "ValidationError",
]

RuleGroup = Literal["service", "exclude", "soft404_title", "soft404_body"]

DEFAULT_SITEMAP_ROOTS: Tuple[str, ...] = (
    "https://www.colorado.gov/sitemap.xml",
    "https://cdhs.colorado.gov/sitemap.xml",
    "https://cdphe.colorado.gov/sitemap.xml",
    "https://cdle.colorado.gov/sitemap.xml",
    "https://dmv.colorado.gov/sitemap.xml",
    "https://tax.colorado.gov/sitemap.xml",
    "https://ag.colorado.gov/sitemap.xml",
    "https://dora.colorado.gov/sitemap.xml",
    "https://oit.colorado.gov/sitemap.xml",
    "https://hcpf.colorado.gov/sitemap.xml",
)


class _Frozen(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)


class RuleSpec(_Frozen):
    """One named regular expression, as written in a config file."""

    label: str = Field(..., min_length=1)
    pattern: str = Field(..., min_length=1)

    @field_validator("pattern")
    @classmethod
    def _must_compile(cls, v: str) -> str:
        try:
            re.compile(v)
        except re.error as exc:
            raise ValueError(f"invalid regular expression {v!r}: {exc}") from exc
        return v


def _specs(table: Tuple[Tuple[str, str], ...]) -> List[RuleSpec]:
    return [RuleSpec(label=label, pattern=pattern) for label, pattern in table]


class RuleSettings(_Frozen):
    """Ordered rule tables for every classifier."""

    service: List[RuleSpec] = Field(default_factory=lambda: _specs(DEFAULT_SERVICE_RULES))
    exclude: List[RuleSpec] = Field(default_factory=lambda: _specs(DEFAULT_EXCLUDE_RULES))
    soft404_title: List[RuleSpec] = Field(
        default_factory=lambda: _specs(DEFAULT_SOFT404_TITLE_RULES)
    )
    soft404_body: List[RuleSpec] = Field(
        default_factory=lambda: _specs(DEFAULT_SOFT404_BODY_RULES)
    )

    def compiled(self, group: RuleGroup) -> Tuple[Rule, ...]:
        return compile_rules((spec.label, spec.pattern) for spec in getattr(self, group))


class AuditSettings(_Frozen):
    """Link-health audit settings."""

    timeout: float = Field(15.0, gt=0, description="Timeout for each HEAD/GET (seconds).")
    concurrency: int = Field(5, ge=1, description="Probes per batch.")
    batch_delay: float = Field(0.5, ge=0, description="Pause between batches (seconds).")
    soft404_scan_limit: int = Field(
        10_000, ge=1, description="Body characters scanned for soft-404 phrases."
    )
    user_agent: str = Field(
        "Colorado-Service-Navigator-LinkChecker/1.0", min_length=1
    )


class DiscoverySettings(_Frozen):
    """Sitemap discovery settings."""

    sitemap_roots: List[str] = Field(default_factory=lambda: list(DEFAULT_SITEMAP_ROOTS))
    timeout: float = Field(30.0, gt=0, description="Timeout for each sitemap fetch (seconds).")
    info_timeout: float = Field(10.0, gt=0, description="Timeout for each page-info GET.")
    concurrency: int = Field(3, ge=1)
    batch_delay: float = Field(0.3, ge=0)
    root_delay: float = Field(0.5, ge=0, description="Pause between sitemap roots.")
    child_delay: float = Field(0.2, ge=0, description="Pause between child sitemaps.")
    max_depth: int = Field(2, ge=0, description="Deepest sitemap index level followed.")
    max_children: int = Field(10, ge=1, description="Child sitemaps followed per index.")
    limit: int = Field(500, ge=0, description="Maximum candidates probed for page info.")
    user_agent: str = Field("Colorado-Service-Navigator-Discovery/1.0", min_length=1)

    @field_validator("sitemap_roots")
    @classmethod
    def _absolute_roots(cls, v: List[str]) -> List[str]:
        bad = [u for u in v if not u.startswith(("http://", "https://"))]
        if bad:
            raise ValueError(f"sitemap roots must be absolute http(s) URLs: {bad}")
        return v


class ScoutConfig(_Frozen):
    """Configuration shared by the audit and discovery pipelines."""

    catalog_path: Path = Field(
        Path("service-catalog.json"), description="JSON catalog of services."
    )
    government_suffixes: Tuple[str, ...] = Field(
        GOVERNMENT_SUFFIXES, description="Two-label suffixes with four-label registrable names."
    )
    audit: AuditSettings = Field(default_factory=AuditSettings)
    discovery: DiscoverySettings = Field(default_factory=DiscoverySettings)
    rules: RuleSettings = Field(default_factory=RuleSettings)

    def with_limit(self, limit: int) -> ScoutConfig:
        """Copy with ``discovery.limit`` replaced."""
        if limit < 0:
            raise ValueError("limit must be >= 0")
        return self.model_copy(
            update={"discovery": self.discovery.model_copy(update={"limit": limit})}
        )


DEFAULT_CFG = Path("configs/default.yaml")


def _read_yaml(path: Path) -> dict[str, Any]:
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as exc:
        raise ValueError(f"Invalid YAML in {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise TypeError(f"Top level of YAML must be a mapping, got {type(data).__name__}")
    return data


def _read_json(path: Path) -> dict[str, Any]:
    try:
        data = json.loads(path.read_text(encoding="utf-8")) or {}
    except json.JSONDecodeError as exc:
        raise ValueError(f"Invalid JSON in {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise TypeError(f"Top level of JSON must be a mapping, got {type(data).__name__}")
    return data


def load_config(path: Union[str, Path, None] = None) -> ScoutConfig:
    """
    Read YAML or JSON and return a validated ScoutConfig.

    With *path* None, ``configs/default.yaml`` is used when present and the
    built-in defaults otherwise.  An explicit path that does not exist raises
    FileNotFoundError.
    """
    if path is None:
        if not DEFAULT_CFG.is_file():
            return ScoutConfig()
        path_obj = DEFAULT_CFG
    else:
        path_obj = Path(path).expanduser().resolve()
        if not path_obj.is_file():
            raise FileNotFoundError(errno.ENOENT, os.strerror(errno.ENOENT), str(path_obj))

    suffix = path_obj.suffix.lower()
    if suffix in (".yaml", ".yml"):
        data: Dict[str, Any] = _read_yaml(path_obj)
    elif suffix == ".json":
        data = _read_json(path_obj)
    else:
        raise ValueError(f"Unsupported config format: {suffix}")

    return ScoutConfig(**data)
