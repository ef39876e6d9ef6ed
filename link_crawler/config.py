# === FILE: link_crawler/config.py ===
"""
Loading and validation of the LinkCrawler run configuration.
Pydantic describes the schema; YAML and JSON files are both accepted.
"""
from __future__ import annotations

import errno
import json
import os
from pathlib import Path
from typing import Any, Dict, Union
from urllib.parse import urlsplit

import yaml
from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
)

__all__ = ["DomainPolicyConfig", "CrawlerConfig", "load_config", "apply_overrides"]


def _lower_hosts(v: Any) -> Any:
    if isinstance(v, str):
        v = [v]
    if isinstance(v, (list, tuple, set, frozenset)):
        return frozenset(str(h).strip().lower() for h in v if str(h).strip())
    return v


class DomainPolicyConfig(BaseModel):
    """Which hosts the crawler may follow links to."""
    model_config = ConfigDict(extra="forbid", frozen=True)

    permitted_domains: frozenset[str] = Field(default_factory=frozenset)
    blacklist_domains: frozenset[str] = Field(default_factory=frozenset)
    free_crawl: bool = False

    @field_validator("permitted_domains", "blacklist_domains", mode="before")
    def _normalize_hosts(cls, v: Any) -> Any:
        return _lower_hosts(v)


class CrawlerConfig(BaseModel):
    """Configuration for a single crawl run."""
    model_config = ConfigDict(extra="forbid", frozen=True)

    seed_url: str = Field(..., min_length=1, description="URL the crawl starts from.")
    permitted_domains: frozenset[str] = Field(
        default_factory=frozenset, description="Hosts that may be followed."
    )
    blacklist_domains: frozenset[str] = Field(
        default_factory=frozenset, description="Hosts that are never followed."
    )
    free_crawl: bool = Field(False, description="Follow any host not blacklisted.")
    max_visits: int = Field(25, ge=1, description="Hard cap on visited pages.")
    workers: int = Field(5, ge=1, description="Number of concurrent page workers.")
    timeout: float = Field(10.0, gt=0, description="Per-request timeout (seconds).")
    user_agent: str = Field("LinkCrawler/0.1", min_length=1, description="User-Agent header.")
    debug: bool = Field(False, description="Log every domain-policy rejection.")
    live_logging: bool = Field(False, description="Log each page as it is admitted.")
    resolve_relative_links: bool = Field(
        False, description="Join relative hrefs against the page URL before filtering."
    )

    @field_validator("permitted_domains", "blacklist_domains", mode="before")
    def _normalize_hosts(cls, v: Any) -> Any:
        return _lower_hosts(v)

    @field_validator("seed_url")
    def _check_seed(cls, v: str) -> str:
        v = v.strip()
        parts = urlsplit(v)
        if parts.scheme not in ("http", "https") or not parts.hostname:
            raise ValueError(f"seed_url must be an absolute http(s) URL, got {v!r}")
        return v

    @property
    def domain_policy(self) -> DomainPolicyConfig:
        return DomainPolicyConfig(
            permitted_domains=self.permitted_domains,
            blacklist_domains=self.blacklist_domains,
            free_crawl=self.free_crawl,
        )


_DEFAULT_CFG = Path("configs/default.yaml")
_PACKAGED_CFG = Path(__file__).resolve().parent / "configs" / "default.yaml"


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


def load_config(path: Union[str, Path, None]) -> CrawlerConfig:
    """
    Read a YAML or JSON file and return a validated CrawlerConfig.
    Without a path, ./configs/default.yaml is used when present, otherwise the
    default shipped with the package.
    Raises FileNotFoundError when an explicitly given file is missing.
    """
    if path is None:
        path_obj = _DEFAULT_CFG if _DEFAULT_CFG.is_file() else _PACKAGED_CFG
    else:
        path_obj = Path(path).expanduser().resolve()
        if not path_obj.is_file():
            raise FileNotFoundError(errno.ENOENT, os.strerror(errno.ENOENT), str(path_obj))

    suffix = path_obj.suffix.lower()
    if suffix in (".yaml", ".yml"):
        data = _read_yaml(path_obj)
    elif suffix == ".json":
        data = _read_json(path_obj)
    else:
        raise ValueError(f"Unsupported config format: {suffix}")

    return CrawlerConfig(**data)


def apply_overrides(config: CrawlerConfig, overrides: Dict[str, Any]) -> CrawlerConfig:
    """Return a re-validated copy of *config* with the non-None *overrides* applied."""
    changes = {k: v for k, v in overrides.items() if v is not None}
    if not changes:
        return config
    data = config.model_dump()
    data.update(changes)
    return CrawlerConfig(**data)
