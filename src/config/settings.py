"""
Application settings and configuration

Uses pydantic-settings for type-safe configuration via environment variables.
All settings use PRESSMARK_ prefix (e.g., PRESSMARK_STRICT_MODE=true).

Settings can also be loaded from a .env file in the project root.
"""

from typing import List

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class AppSettings(BaseSettings):
    """
    Application configuration via environment variables.

    Environment variables use PRESSMARK_ prefix.

    Examples:
        PRESSMARK_INCLUDES_DIR=partials
        PRESSMARK_STRICT_MODE=true
        PRESSMARK_JOBS=4
    """

    model_config = SettingsConfigDict(
        env_prefix="PRESSMARK_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Parser configuration
    front_matter_delimiter: str = Field(
        default="---",
        description="Line that opens and closes the front matter block",
    )

    max_document_chars: int = Field(
        default=1_000_000,
        description="Sources longer than this many characters are rejected",
    )

    # Site layout
    includes_dir: str = Field(
        default="_includes",
        description="Directory (relative to the site root) holding partial templates",
    )

    layouts_dir: str = Field(
        default="_layouts",
        description="Directory (relative to the site root) holding page layouts",
    )

    site_config_file: str = Field(
        default="_config.yml",
        description="Site configuration file exposed to templates as site.*",
    )

    source_extensions: str = Field(
        default=".md,.markdown,.html",
        description="Comma separated list of file extensions treated as documents",
    )

    # Output configuration
    output_extension: str = Field(
        default=".html",
        description="Extension of files written in html output format",
    )

    pygments_style: str = Field(
        default="monokai",
        description="Pygments style for highlighted code when _config.yml sets none",
    )

    # Processing configuration
    strict_mode: bool = Field(
        default=False,
        description="Strict mode: treat warnings (unused captures, undefined variables) as errors",
    )

    jobs: int = Field(
        default=1,
        description="Number of documents rendered in parallel during a site run",
    )

    debug_mode: bool = Field(
        default=False,
        description="Enable debug output during rendering",
    )

    def sourceExtensions_list(self) -> List[str]:
        """
        Normalized list of document extensions.

        Returns:
            Lower-cased extensions, each with a leading dot

        Example:
            >>> settings = AppSettings(source_extensions="md, .HTML")
            >>> settings.sourceExtensions_list()
            ['.md', '.html']
        """
        extensions = []
        for item in self.source_extensions.split(","):
            item = item.strip().lower()
            if not item:
                continue
            if not item.startswith("."):
                item = "." + item
            extensions.append(item)
        return extensions


# Singleton instance - import this in your code
appsettings = AppSettings()
