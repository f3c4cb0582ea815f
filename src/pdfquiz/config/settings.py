"""Pydantic settings models for pdfquiz configuration.

Each settings class loads from its own YAML config file with environment
variable override support. Source priority (highest to lowest):

    1. Explicit keyword arguments (e.g., tests, CLI overrides)
    2. Environment variables (with prefix, e.g., OCR_MAX_PAGES)
    3. .env file
    4. YAML config file (e.g., config/ocr.yaml)
    5. Default values defined here

The numeric thresholds below are empirical tuning constants. They are kept
configurable rather than hard-coded because they are expected to change.

Config paths are resolved relative to PROJECT_ROOT so the application works
regardless of the current working directory.
"""

from pathlib import Path

from pydantic import Field
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    YamlConfigSettingsSource,
)

# Resolve project root: settings.py -> config/ -> pdfquiz/ -> src/ -> repo root
PROJECT_ROOT = Path(__file__).resolve().parents[3]

_CONFIG_DIR = PROJECT_ROOT / "config"
_ENV_FILE = PROJECT_ROOT / ".env"


class _YamlSettings(BaseSettings):
    """Base class wiring the YAML source below env and .env."""

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            YamlConfigSettingsSource(settings_cls),
            file_secret_settings,
        )


class ExtractionSettings(_YamlSettings):
    """Text-layer extraction thresholds and normalization options."""

    # Assembled text (page markers included) below this length is "low yield"
    min_text_chars: int = Field(default=50, ge=0)
    # Low-yield documents with fewer meaningful text runs are treated as scans
    min_meaningful_items: int = Field(default=10, ge=0)
    page_timeout_seconds: float = Field(default=5.0, gt=0)
    normalization_form: str = "NFKC"  # "NFC", "NFKC", ...

    # Share of the 0-100 progress range spent opening the document
    open_progress_share: int = Field(default=20, ge=0, le=100)
    # Upper bound of text-layer progress when OCR is pre-authorized
    text_progress_ceiling_with_ocr: int = Field(default=50, ge=0, le=100)

    model_config = SettingsConfigDict(
        yaml_file=str(_CONFIG_DIR / "extraction.yaml"),
        env_file=str(_ENV_FILE),
        env_prefix="EXTRACTION_",
        extra="ignore",
    )


class OCRSettings(_YamlSettings):
    """OCR fallback: page cap, batching, rendering, preprocessing."""

    max_pages: int = Field(default=70, ge=1)
    batch_size: int = Field(default=5, ge=1)
    render_scale: float = Field(default=1.5, gt=0)
    language: str = "vie+eng"
    enhance_visibility: bool = True
    binarize_factor: float = Field(default=0.9, gt=0)
    batch_pause_seconds: float = Field(default=0.0, ge=0)
    tesseract_config: str = ""  # extra CLI flags, e.g. "--psm 6"

    model_config = SettingsConfigDict(
        yaml_file=str(_CONFIG_DIR / "ocr.yaml"),
        env_file=str(_ENV_FILE),
        env_prefix="OCR_",
        extra="ignore",
    )


class EngineSettings(_YamlSettings):
    """Locations of the parsing and recognition engines' runtime assets."""

    tesseract_cmd: str = "tesseract"
    tessdata_dir: str | None = None

    model_config = SettingsConfigDict(
        yaml_file=str(_CONFIG_DIR / "engines.yaml"),
        env_file=str(_ENV_FILE),
        env_prefix="ENGINE_",
        extra="ignore",
    )


class QuizSettings(_YamlSettings):
    """Quiz regeneration: duplicate-avoidance window and source size cap."""

    history_limit: int = Field(default=50, ge=0)
    max_source_chars: int = Field(default=800_000, ge=1)

    model_config = SettingsConfigDict(
        yaml_file=str(_CONFIG_DIR / "quiz.yaml"),
        env_file=str(_ENV_FILE),
        env_prefix="QUIZ_",
        extra="ignore",
    )


class PipelineSettings(_YamlSettings):
    """Pipeline operations: logging and input size limits."""

    log_dir: str = "logs"
    log_max_bytes: int = 10_485_760  # 10MB
    log_backup_count: int = 5
    max_file_bytes: int = 52_428_800  # 50MB

    model_config = SettingsConfigDict(
        yaml_file=str(_CONFIG_DIR / "pipeline.yaml"),
        env_file=str(_ENV_FILE),
        env_prefix="PIPELINE_",
        extra="ignore",
    )
