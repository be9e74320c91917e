from __future__ import annotations

from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="TASKFLOW_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    environment: str = "dev"
    log_level: str = "INFO"

    database_url: str = "sqlite:///./taskflow.db"

    # Entity store medium: sql | json | memory
    storage_backend: str = "sql"
    storage_dir: Path = Path("./.taskflow-data")
    seed_demo_data: bool = True

    # Optional shared bearer token; empty disables the check.
    local_auth_token: str = ""

    notification_poll_interval_seconds: float = 30.0
    notification_page_size: int = 20

    # Derived metrics tuning
    weight_task_completion: float = 0.4
    weight_member_efficiency: float = 0.3
    weight_project_progress: float = 0.3
    health_overdue_task_penalty: int = 5
    health_urgent_penalty: int = 20
    health_urgent_days: int = 7
    health_urgent_progress: int = 80
    health_near_penalty: int = 10
    health_near_days: int = 14
    health_near_progress: int = 60
    health_critical_below: int = 50
    health_warning_below: int = 70
    health_moderate_below: int = 85
    upcoming_deadline_days: int = 7
    capacity_hours_per_member: int = 160
    allocation_overloaded_above: int = 90
    allocation_underutilized_below: int = 60


settings = Settings()
