"""Tunable settings for linking and planning, read from the environment"""
from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class LinkingSettings(BaseSettings):
    """Auto-link and reconciliation settings"""
    model_config = SettingsConfigDict(env_file=".env", env_prefix="LINKING_", extra="ignore")

    auto_link_threshold: float = Field(default=0.6, ge=0.0, le=1.0)
    # Candidate pool sizes used when loading from the stores
    external_candidate_limit: int = Field(default=100, gt=0)
    auto_link_candidate_limit: int = Field(default=50, gt=0)


class PlanningSettings(BaseSettings):
    """Gap analysis and schedule generation settings"""
    model_config = SettingsConfigDict(env_file=".env", env_prefix="PLANNING_", extra="ignore")

    long_form_percent: int = Field(default=60, ge=0, le=100)
    max_schedule_weeks: int = Field(default=52, gt=0)
    default_posts_per_week: int = Field(default=3, ge=1, le=14)


@lru_cache
def get_linking_settings() -> LinkingSettings:
    return LinkingSettings()


@lru_cache
def get_planning_settings() -> PlanningSettings:
    return PlanningSettings()
