"""
Unified Configuration - runtime settings.

Supports:
- Default render strategy (vector | raster)
- Browser launch flags / timeouts
- CLI output directory

Page geometry is NOT here: it is fixed (see pagefit.config.PAGE).
"""
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_prefix="PAGEFIT_", extra="ignore")

    app_name: str = "pagefit"
    env: str = "dev"  # dev | staging | prod
    log_level: str = "INFO"

    # ═══════════════════════════════════════════════════════════════════════════
    # Rendering
    # ═══════════════════════════════════════════════════════════════════════════
    default_strategy: str = "vector"  # vector | raster
    headless: bool = True
    # Chromium runs unprivileged inside containers
    browser_args: list[str] = ["--no-sandbox", "--disable-setuid-sandbox"]
    load_timeout_ms: int = 15000  # network quiescence bound (non-fatal)
    settle_timeout_ms: int = 3000  # raster: wait for fit routine signal
    max_html_bytes: int = 5 * 1024 * 1024  # API payload limit

    # ═══════════════════════════════════════════════════════════════════════════
    # Export
    # ═══════════════════════════════════════════════════════════════════════════
    default_basename: str = "belge"
    output_dir: str = "."

    # ═══════════════════════════════════════════════════════════════════════════
    # Helpers
    # ═══════════════════════════════════════════════════════════════════════════
    @property
    def is_production(self) -> bool:
        return self.env in ("prod", "production")


# Singleton
settings = Settings()
