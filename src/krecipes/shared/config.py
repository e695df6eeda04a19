"""Site configuration.

Values are resolved in increasing precedence:

1. defaults on :class:`SiteConfig`
2. a YAML file (``krecipes.yaml`` in the working directory, or an explicit path)
3. environment variables (``KRECIPES_CONTENT_DIR``, ``KRECIPES_OUTPUT_DIR``,
   ``KRECIPES_SITE_URL``, ``KRECIPES_INCLUDE_DRAFTS``, ``KRECIPES_STRICT``)
4. explicit overrides passed by the caller (CLI options)
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Mapping

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from krecipes.errors import ConfigError

DEFAULT_CONFIG_FILE = "krecipes.yaml"

DEFAULT_CATEGORIES = [
    "networking",
    "storage",
    "security",
    "deployments",
    "observability",
    "troubleshooting",
    "autoscaling",
    "gitops",
    "helm",
    "configuration",
]

DEFAULT_HIGHLIGHT_LANGUAGES = [
    "bash", "sh", "shell", "console", "zsh",
    "yaml", "yml", "json", "toml", "ini", "properties", "xml", "html", "css",
    "go", "python", "py", "javascript", "js", "typescript", "ts", "java", "rust",
    "dockerfile", "docker", "makefile", "hcl", "terraform", "nginx", "sql",
    "promql", "rego", "cue", "jsonnet", "diff", "text", "plaintext", "txt",
    "mermaid", "markdown", "md", "powershell",
]

_ENV_KEYS = {
    "KRECIPES_CONTENT_DIR": "content_dir",
    "KRECIPES_OUTPUT_DIR": "output_dir",
    "KRECIPES_SITE_URL": "site_url",
    "KRECIPES_INCLUDE_DRAFTS": "include_drafts",
    "KRECIPES_STRICT": "strict",
}


class SiteConfig(BaseModel):
    content_dir: Path = Path("src/content/recipes")
    output_dir: Path = Path("dist")
    site_url: str = "https://kubernetes.recipes/"
    site_title: str = "Kubernetes Recipes"
    default_author: str = "Luca Berton"
    categories: list[str] = Field(default_factory=lambda: list(DEFAULT_CATEGORIES))
    highlight_languages: list[str] = Field(
        default_factory=lambda: list(DEFAULT_HIGHLIGHT_LANGUAGES)
    )
    include_drafts: bool = False
    strict: bool = False

    @field_validator("site_url")
    @classmethod
    def _trailing_slash(cls, value: str) -> str:
        return value if value.endswith("/") else value + "/"

    @field_validator("categories", "highlight_languages")
    @classmethod
    def _lowercase(cls, value: list[str]) -> list[str]:
        return [v.strip().lower() for v in value]


def _read_file(path: Path) -> dict[str, Any]:
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except OSError as exc:
        raise ConfigError(f"Cannot read config {path}: {exc}") from exc
    except yaml.YAMLError as exc:
        raise ConfigError(f"Invalid YAML in config {path}: {exc}") from exc
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Config {path} must contain a mapping at the top level")
    return data


def _from_env(environ: Mapping[str, str]) -> dict[str, Any]:
    values: dict[str, Any] = {}
    for env_key, field_name in _ENV_KEYS.items():
        raw = environ.get(env_key)
        if raw is None or raw == "":
            continue
        if field_name in ("include_drafts", "strict"):
            values[field_name] = raw.strip().lower() in ("1", "true", "yes", "on")
        else:
            values[field_name] = raw
    return values


def load_config(
    path: str | Path | None = None,
    overrides: dict[str, Any] | None = None,
    environ: Mapping[str, str] | None = None,
) -> SiteConfig:
    """Resolve a :class:`SiteConfig` from file, environment and overrides.

    Raises:
        ConfigError: If an explicit path does not exist, the file is not a
            YAML mapping, or the merged values fail validation.
    """
    values: dict[str, Any] = {}

    if path is not None:
        config_path = Path(path)
        if not config_path.is_file():
            raise ConfigError(f"Config file not found: {config_path}")
        values.update(_read_file(config_path))
    elif Path(DEFAULT_CONFIG_FILE).is_file():
        values.update(_read_file(Path(DEFAULT_CONFIG_FILE)))

    values.update(_from_env(os.environ if environ is None else environ))
    values.update({k: v for k, v in (overrides or {}).items() if v is not None})

    try:
        return SiteConfig(**values)
    except ValidationError as exc:
        raise ConfigError(f"Invalid configuration: {exc}") from exc
