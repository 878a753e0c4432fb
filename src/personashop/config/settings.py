"""Engine configuration."""

from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class EngineConfig(BaseSettings):
    """Configuration for the personalization engine."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="PERSONASHOP_",
        extra="ignore",
    )

    # Durable behavior storage (None keeps everything in memory)
    storage_dir: Path | None = None
    behavior_key: str = "user_behavior_data"
    session_key: str = "session_id"

    # Re-evaluation loop
    reevaluate_interval_seconds: float = 30.0
    time_tick_seconds: float = 5.0

    # Classifier training
    training_epochs: int = 50
    samples_per_persona: int = 50
    batch_size: int = 32
    learning_rate: float = 0.01
    hidden_units: tuple[int, ...] = (16, 8)
    seed: int = 42

    log_level: str = "INFO"
