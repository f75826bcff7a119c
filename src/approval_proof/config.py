"""Configuration surface for approval-proof verification."""
from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .amounts import WholeAmountStyle


class ApprovalProofSettings(BaseSettings):
    """Verification settings, read from ``APPROVAL_PROOF_*`` variables."""

    model_config = SettingsConfigDict(
        env_prefix="APPROVAL_PROOF_",
        env_file=".env",
        extra="ignore",
    )

    # Canonical message
    whole_amount_style: WholeAmountStyle = WholeAmountStyle.TWO_DECIMALS

    # Batch execution; 1 verifies items sequentially
    max_workers: int = Field(default=1, ge=1)

    # Logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    log_json: bool = False

    @field_validator("whole_amount_style", mode="before")
    @classmethod
    def parse_whole_amount_style(cls, v):
        """Accept ``one-decimal`` as well as ``one_decimal``."""
        if isinstance(v, str):
            return v.strip().lower().replace("-", "_")
        return v

    @field_validator("log_level", mode="before")
    @classmethod
    def upper_log_level(cls, v):
        if isinstance(v, str):
            return v.strip().upper()
        return v


@lru_cache
def load_settings(env_file: str | None = None) -> ApprovalProofSettings:
    """Load settings once per process.

    Without ``env_file`` the ``.env`` in the working directory is read, if any.
    """
    if env_file:
        return ApprovalProofSettings(_env_file=Path(env_file))
    return ApprovalProofSettings()


__all__ = [
    "ApprovalProofSettings",
    "load_settings",
]
