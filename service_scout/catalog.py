"""service_scout.catalog: Read-only access to the JSON service catalog."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from service_scout.logger import logger

__all__ = ["CatalogError", "ServiceRecord", "load_catalog", "parse_catalog"]


class CatalogError(Exception):
    """The catalog could not be read or does not describe any services."""


class ServiceRecord(BaseModel):
    """One catalog entry. Only the fields the pipelines consume are modelled."""

    model_config = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)

    id: Union[int, str]
    name: Union[str, Dict[str, str]] = ""
    url: str = Field(..., min_length=1)
    department_url: Optional[str] = Field(None, alias="departmentUrl")

    @property
    def display_name(self) -> str:
        """English name when the catalog stores translations."""
        if isinstance(self.name, str):
            return self.name
        return self.name.get("en") or next(iter(self.name.values()), "")


def parse_catalog(data: Any) -> List[ServiceRecord]:
    """Validate an already-decoded catalog document.

    Accepts either ``{"services": [...]}`` or a bare list of services.
    """
    if isinstance(data, dict):
        data = data.get("services")
    if not isinstance(data, list):
        raise CatalogError("catalog must be a list of services or contain a 'services' list")
    try:
        return [ServiceRecord.model_validate(item) for item in data]
    except ValidationError as exc:
        raise CatalogError(f"invalid service record: {exc}") from exc


def load_catalog(path: Union[str, Path]) -> List[ServiceRecord]:
    """Read and validate the catalog at *path*; any failure is a CatalogError."""
    p = Path(path).expanduser()
    try:
        raw = p.read_text(encoding="utf-8")
    except OSError as exc:
        raise CatalogError(f"cannot read catalog {p}: {exc}") from exc
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise CatalogError(f"invalid JSON in catalog {p}: {exc}") from exc
    services = parse_catalog(data)
    logger.info("Loaded %d services from %s", len(services), p)
    return services
