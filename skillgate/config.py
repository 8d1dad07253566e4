from __future__ import annotations

from datetime import timedelta
from typing import Literal

from pydantic_settings import BaseSettings

from skillgate.verification.models import ValidatorConfig


class Settings(BaseSettings):
    # Signing certificate policy
    cert_host: str = "s3.amazonaws.com"
    cert_path_prefix: str = "/echo.api/"
    cert_subject_name: str = "echo-api.amazon.com"
    cert_fetch_timeout_seconds: float = 5.0

    # Escape hatches, never enable in production
    insecure_skip_verify: bool = False
    dev_bypass: bool = False

    # Replay window
    freshness_window_seconds: float = 150.0

    # Skill
    skill_route: str = "/echo/skill"
    skill_application_id: str = ""

    # Server
    gateway_host: str = "0.0.0.0"
    gateway_port: int = 8080
    log_level: Literal["debug", "info", "warning", "error", "critical"] = "info"

    model_config = {"env_prefix": "", "case_sensitive": False}

    def validator_config(self) -> ValidatorConfig:
        return ValidatorConfig(
            allowed_cert_host=self.cert_host,
            allowed_cert_path_prefix=self.cert_path_prefix,
            required_subject_name=self.cert_subject_name,
            fetch_timeout=timedelta(seconds=self.cert_fetch_timeout_seconds),
            insecure_skip_verify=self.insecure_skip_verify,
            freshness_window=timedelta(seconds=self.freshness_window_seconds),
            dev_bypass=self.dev_bypass,
        )
