"""
Configuration loader for journalbot.

What it does:
- Reads static settings from `config/config.yaml` (path overridable with
  `JOURNALBOT_CONFIG`). A missing file yields the defaults.
- Applies directory overrides from `JOURNALBOT_DATA_DIR`,
  `JOURNALBOT_REPORTS_DIR` and `JOURNALBOT_LOGS_DIR`.
- Validates the resulting configuration using Pydantic models.

Where it is used:
- Called by `journalbot.main` to build a `Settings` object, which then
  constructs each journal with its storage path and tuning knobs.
"""

import os
from typing import Dict, List, Literal

import yaml
from pydantic import BaseModel, Field, field_validator, model_validator

from ..journals.knowledge_base import DEFAULT_RULES, CategoryRule

DEFAULT_CONFIG_PATH = "config/config.yaml"

ENV_OVERRIDES = {
    "JOURNALBOT_DATA_DIR": "data_dir",
    "JOURNALBOT_REPORTS_DIR": "reports_dir",
    "JOURNALBOT_LOGS_DIR": "logs_dir",
}


class RecommendationConfig(BaseModel):
    """Recommendation tracker storage and analytics knobs."""
    file: str = "recommendations.json"
    outcome_comparison: Literal["lexicographic", "numeric", "equality"] = "lexicographic"
    strong_threshold: float = 70.0
    good_threshold: float = 50.0

    @model_validator(mode="after")
    def ordered_thresholds(self):
        if self.good_threshold > self.strong_threshold:
            raise ValueError("good_threshold must not exceed strong_threshold")
        return self


class SkillConfig(BaseModel):
    level: int = Field(ge=0, le=10)
    learning: List[str] = []


class LearningLogConfig(BaseModel):
    file: str = "insights.json"
    skills: Dict[str, SkillConfig] = {}


class KnowledgeBaseConfig(BaseModel):
    file: str = "knowledge-base.json"
    rules: List[CategoryRule] = Field(default_factory=lambda: list(DEFAULT_RULES))


class SelfMonitorConfig(BaseModel):
    file_pattern: str = "session-{date}.json"
    mood: str = "positive"


class MetricsConfig(BaseModel):
    enabled: bool = False
    port: int = 8000


class Settings(BaseModel):
    """Runtime settings assembled from YAML + environment variables."""
    data_dir: str = "data"
    reports_dir: str = "reports"
    logs_dir: str = "logs"
    recommendations: RecommendationConfig = Field(default_factory=RecommendationConfig)
    learning_log: LearningLogConfig = Field(default_factory=LearningLogConfig)
    knowledge_base: KnowledgeBaseConfig = Field(default_factory=KnowledgeBaseConfig)
    self_monitor: SelfMonitorConfig = Field(default_factory=SelfMonitorConfig)
    metrics: MetricsConfig = Field(default_factory=MetricsConfig)

    @field_validator("data_dir", "reports_dir", "logs_dir")
    @classmethod
    def not_empty(cls, v, info):
        if not v:
            raise ValueError(f"Missing required directory setting: {info.field_name}")
        return v

    def data_path(self, name: str) -> str:
        return os.path.join(self.data_dir, name)

    def session_path(self, day: str) -> str:
        return self.data_path(self.self_monitor.file_pattern.format(date=day))


def load_settings(path: str = "") -> Settings:
    """Load YAML config, apply env-var overrides, and return Settings."""
    path = path or os.getenv("JOURNALBOT_CONFIG", DEFAULT_CONFIG_PATH)
    config = {}
    if os.path.exists(path):
        with open(path, "r") as f:
            config = yaml.safe_load(f) or {}
    for env_name, key in ENV_OVERRIDES.items():
        value = os.getenv(env_name, "")
        if value:
            config[key] = value
    return Settings(**config)
