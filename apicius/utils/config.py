"""Application configuration."""
from __future__ import annotations

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from apicius.render import constants


class Settings(BaseSettings):
    """Runtime settings loaded from .env and APICIUS_* environment variables."""

    model_config = SettingsConfigDict(env_prefix="APICIUS_", env_file=".env", env_file_encoding="utf-8", extra="ignore")

    log_level: str = Field(
        default="WARNING",
        validation_alias=AliasChoices("APICIUS_LOG_LEVEL", "LOG_LEVEL"),
    )
    json_indent: int = 2

    # HTML table output
    standalone: bool = False
    html_header: str = constants.STANDALONE_HTML_HEADER
    html_footer: str = constants.STANDALONE_HTML_FOOTER
    amount_class: str = constants.AMOUNT_CLASS
    seasonings_class: str = constants.SEASONINGS_CLASS
    ingredient_class: str = constants.INGREDIENT_CLASS
    action_class: str = constants.ACTION_CLASS
    done_class: str = constants.DONE_CLASS


settings = Settings()
