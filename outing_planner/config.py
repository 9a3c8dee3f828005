from __future__ import annotations

import os
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import List

from dotenv import load_dotenv

# Load .env from project root
load_dotenv(Path(__file__).resolve().parent.parent / ".env")


class EmptySlotPolicy(str, Enum):
    """What to do with a slot whose venue pool resolved to nothing."""

    DROP = "drop"
    REJECT = "reject"


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_policy() -> EmptySlotPolicy:
    raw = (os.getenv("OUTING_PLANNER_EMPTY_SLOT_POLICY") or "").strip().lower()
    try:
        return EmptySlotPolicy(raw) if raw else EmptySlotPolicy.DROP
    except ValueError:
        return EmptySlotPolicy.DROP


def _env_origins() -> List[str]:
    raw = os.getenv("OUTING_PLANNER_ALLOWED_ORIGINS") or "*"
    origins = [origin.strip() for origin in raw.split(",") if origin.strip()]
    return origins or ["*"]


@dataclass(frozen=True)
class PlannerConfig:
    # scoring oracle (Groq exposes an OpenAI-compatible endpoint)
    scoring_api_key: str = field(default_factory=lambda: os.getenv("GROQ_API_KEY", ""))
    scoring_base_url: str = field(
        default_factory=lambda: os.getenv("OUTING_PLANNER_SCORING_BASE_URL", "https://api.groq.com/openai/v1")
    )
    scoring_model: str = field(
        default_factory=lambda: os.getenv("OUTING_PLANNER_SCORING_MODEL", "openai/gpt-oss-120b")
    )
    scoring_timeout: float = field(default_factory=lambda: _env_float("OUTING_PLANNER_SCORING_TIMEOUT", 20.0))
    score_batch_size: int = field(default_factory=lambda: _env_int("OUTING_PLANNER_SCORE_BATCH_SIZE", 5))

    # distance matrix
    openroute_api_key: str = field(default_factory=lambda: os.getenv("OPENROUTE_API_KEY", ""))
    openroute_url: str = field(
        default_factory=lambda: os.getenv("OUTING_PLANNER_OPENROUTE_URL", "https://api.openrouteservice.org")
    )
    openroute_profile: str = field(
        default_factory=lambda: os.getenv("OUTING_PLANNER_OPENROUTE_PROFILE", "driving-car")
    )
    matrix_timeout: float = field(default_factory=lambda: _env_float("OUTING_PLANNER_MATRIX_TIMEOUT", 10.0))

    empty_slot_policy: EmptySlotPolicy = field(default_factory=_env_policy)
    allowed_origins: List[str] = field(default_factory=_env_origins)


def load_config() -> PlannerConfig:
    """Read a fresh config snapshot from the environment."""
    return PlannerConfig()
