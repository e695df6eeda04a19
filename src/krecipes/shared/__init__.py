"""Configuration and logging shared by the CLI, builder and service."""

from krecipes.shared.config import SiteConfig, load_config
from krecipes.shared.logger import BuildLogger

__all__ = ["BuildLogger", "SiteConfig", "load_config"]
