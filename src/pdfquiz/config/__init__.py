"""Configuration package -- typed, validated settings from YAML + .env."""

from .settings import (
    EngineSettings,
    ExtractionSettings,
    OCRSettings,
    PipelineSettings,
    QuizSettings,
)

__all__ = [
    "EngineSettings",
    "ExtractionSettings",
    "OCRSettings",
    "PipelineSettings",
    "QuizSettings",
    "load_all_settings",
]


def load_all_settings() -> tuple[
    PipelineSettings, EngineSettings, ExtractionSettings, OCRSettings, QuizSettings
]:
    """Load and return all configuration objects.

    Returns a tuple of (PipelineSettings, EngineSettings, ExtractionSettings,
    OCRSettings, QuizSettings), each populated from its own YAML file with
    environment variable overrides.
    """
    return (
        PipelineSettings(),
        EngineSettings(),
        ExtractionSettings(),
        OCRSettings(),
        QuizSettings(),
    )
