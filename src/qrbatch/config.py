"""
Settings for the batch QR generator.

Every field can be overridden from the environment with a QRBATCH_ prefix
(QRBATCH_WORKER_COUNT=8, QRBATCH_PIXEL_SIZE=512, ...) or from a local .env
file. Explicit keyword arguments win over both.
"""

import os
from functools import lru_cache
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from qrcode.constants import ERROR_CORRECT_L, ERROR_CORRECT_M, ERROR_CORRECT_Q, ERROR_CORRECT_H

ERROR_LEVELS = {
    "L": ERROR_CORRECT_L,  # 7%
    "M": ERROR_CORRECT_M,  # 15%
    "Q": ERROR_CORRECT_Q,  # 25%
    "H": ERROR_CORRECT_H,  # 30%
}

BUSY_POLICIES = {"block", "reject"}


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="QRBATCH_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )

    # Worker pool
    # None means one worker per CPU. Higher values trade filesystem
    # contention for lower latency on the encode step.
    worker_count: Optional[int] = Field(None, ge=1)
    busy_policy: str = "block"
    strict_output_folder: bool = True

    # Encoder
    pixel_size: int = Field(256, ge=21)
    error_correction: str = "M"
    box_size: int = Field(10, ge=1)
    border: int = Field(4, ge=0)
    fill_color: str = "#000000"
    back_color: str = "#ffffff"

    log_level: str = "INFO"

    @field_validator("error_correction")
    @classmethod
    def validate_error_correction(cls, v: str) -> str:
        v = v.strip().upper()
        if v not in ERROR_LEVELS:
            raise ValueError("error_correction must be one of L|M|Q|H")
        return v

    @field_validator("busy_policy")
    @classmethod
    def validate_busy_policy(cls, v: str) -> str:
        v = v.strip().lower()
        if v not in BUSY_POLICIES:
            raise ValueError("busy_policy must be one of block|reject")
        return v

    def resolved_worker_count(self) -> int:
        """Configured worker count, or the number of CPUs (at least 1)."""
        if self.worker_count:
            return self.worker_count
        return max(1, os.cpu_count() or 1)


@lru_cache()
def get_settings() -> Settings:
    """Return cached settings to avoid reparsing env on every call."""
    return Settings()
