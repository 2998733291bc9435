"""Runtime configuration for Dominion AI."""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Environment-driven runtime settings."""

    model_config = SettingsConfigDict(env_prefix="DOMINION_AI_", env_file=".env", extra="ignore")

    app_name: str = "dominion-ai"
    log_level: str = "INFO"
    search_expansion_limit: int = Field(
        default=1000,
        description="Maximum GOAP frontier expansions before a search gives up.",
    )
    htn_max_depth: int = Field(default=8, description="Maximum nesting of compound HTN tasks.")
    planning_deadline_ms: float | None = Field(
        default=None,
        description="Optional wall-clock budget for a single GOAP search.",
    )
    simulation_turns: int = 200
    simulation_agents: int = 8
    simulation_seed: int = 42
    scenario_path: str | None = Field(default=None, description="JSON scenario used when no path is given.")
    telemetry_enabled: bool = True


settings = Settings()
