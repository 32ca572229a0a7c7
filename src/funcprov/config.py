"""Configuration management"""

from pydantic_settings import BaseSettings, SettingsConfigDict

from funcprov.model import CaseSensitivity


class Settings(BaseSettings):
    """Library defaults, overridable through FUNCPROV_* environment variables"""

    model_config = SettingsConfigDict(env_prefix="FUNCPROV_")

    # Names
    default_case_sensitivity: CaseSensitivity = CaseSensitivity.SENSITIVE
    name_max_length: int = 255

    # Canonical tokens
    alias_token_prefix: str = "urn:alias:"  # used when an alias has no token of its own


settings = Settings()
