"""
Site configuration loader for pressmark runs.

A site is a directory of article sources. It may contain:
  - _config.yml: Site-wide values exposed to templates as site.*
  - _includes/: Template partials
  - _layouts/: Page layouts
Directories whose names start with "_" or "." never hold documents.
"""

import yaml
from pathlib import Path
from typing import Dict, Any, List, Optional

from ..config import appsettings
from .errors import SiteConfigError


class SiteConfig:
    """
    Represents a site's configuration.

    A site configuration consists of:
      - Values from _config.yml (title, baseurl, pygments_style, ...)
      - The includes and layouts directories, overridable from _config.yml
        with the includes_dir and layouts_dir keys
    """

    def __init__(
        self,
        root: Optional[Path] = None,
        config: Optional[Dict[str, Any]] = None,
        config_file: Optional[str] = None,
    ):
        """
        Load a site configuration.

        Args:
            root: Site root directory; None for a site without files
            config: Explicit configuration, skips reading _config.yml
            config_file: Configuration file name (default: appsettings.site_config_file)

        Raises:
            SiteConfigError: If _config.yml exists but cannot be parsed or is
                             not a mapping
        """
        self.root = Path(root) if root is not None else None
        self.config_path: Optional[Path] = None

        if config is not None:
            self.config: Dict[str, Any] = dict(config)
        elif self.root is not None:
            self.config_path = self.root / (config_file or appsettings.site_config_file)
            self.config = self._config_load(self.config_path) if self.config_path.exists() else {}
        else:
            self.config = {}

    def _config_load(self, config_path: Path) -> Dict[str, Any]:
        """Load and parse _config.yml"""
        try:
            with open(config_path, 'r', encoding='utf-8') as f:
                config: Any = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise SiteConfigError(f"Failed to parse {config_path.name}: {e}")
        except OSError as e:
            raise SiteConfigError(f"Failed to load {config_path.name}: {e}")

        if config is None:
            return {}
        if not isinstance(config, dict):
            raise SiteConfigError(f"{config_path.name} must contain a mapping")
        return config

    def config_get(self, key: str, default: Any = None) -> Any:
        """
        Get a configuration value from _config.yml.

        Supports nested keys with dot notation:
          site.config_get('author.name', 'anonymous')

        Args:
            key: Configuration key (supports dot notation)
            default: Default value if key doesn't exist

        Returns:
            Configuration value or default
        """
        keys: list[str] = key.split('.')
        value: Any = self.config

        for k in keys:
            if isinstance(value, dict) and k in value:
                value = value[k]
            else:
                return default

        return value

    def pygmentsStyle_get(self) -> str:
        """
        Get Pygments style name for syntax highlighting.

        Returns:
            Style from _config.yml (pygments_style), else appsettings.pygments_style
        """
        return self.config_get('pygments_style', appsettings.pygments_style)

    def includesDir_get(self, override: Optional[str] = None) -> Optional[Path]:
        """Directory holding template partials, or None for a file-less site"""
        return self._dir_resolve(override or self.config_get('includes_dir', appsettings.includes_dir))

    def layoutsDir_get(self, override: Optional[str] = None) -> Optional[Path]:
        """Directory holding page layouts, or None for a file-less site"""
        return self._dir_resolve(override or self.config_get('layouts_dir', appsettings.layouts_dir))

    def _dir_resolve(self, name: str) -> Optional[Path]:
        path = Path(name)
        if path.is_absolute():
            return path
        if self.root is None:
            return None
        return self.root / path

    def __repr__(self) -> str:
        return f"SiteConfig(root='{self.root}', keys={sorted(self.config)})"


def sources_list(root: Path, extensions: Optional[List[str]] = None) -> List[Path]:
    """
    List all document sources below a site root.

    Args:
        root: Site root directory
        extensions: Accepted extensions (default: appsettings.sourceExtensions_list())

    Returns:
        Sorted source paths, skipping anything under a directory whose name
        starts with "_" or "."
    """
    extensions = extensions or appsettings.sourceExtensions_list()

    if not root.exists():
        return []

    sources: list[Path] = []
    for item in root.rglob("*"):
        if not item.is_file() or item.suffix.lower() not in extensions:
            continue
        relative = item.relative_to(root)
        if any(part.startswith(("_", ".")) for part in relative.parts):
            continue
        sources.append(item)

    return sorted(sources)
