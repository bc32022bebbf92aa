"""Application configuration from environment variables."""

from __future__ import annotations

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    contrastsight_env: str = "development"
    contrastsight_log_level: str = "info"

    # CORS
    cors_origins: list[str] = ["http://localhost:3000"]

    # Rasterization
    svg_density: int = 300  # DPI for SVG
    vector_density: int = 300  # DPI for EMF/WMF via ImageMagick
    max_image_size: int = 0  # longest side in px, 0 = no downscale

    # Uploads (HTTP API)
    max_upload_bytes: int = 20 * 1024 * 1024

    # Batch runs, 0 = one per CPU core
    workers: int = 0

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


settings = Settings()
