from pydantic_settings import BaseSettings, SettingsConfigDict  # type: ignore


class Settings(BaseSettings):
    # Storage
    OPTIONS_FILE: str = "options.json"
    ALLOWED_DOMAINS_OPTION: str = "allowed_domains"

    # Shortcode tag expanded in authored content
    SHORTCODE_TAG: str = "safe_iframe"

    # Admin settings page; empty token disables it
    ADMIN_TOKEN: str = ""
    TEMPLATES_DIR: str = "templates"

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


settings = Settings()
