
from dataclasses import dataclass

from pydantic import Field
from pydantic_settings import BaseSettings


@dataclass(frozen=True)
class TemplateIds:
    """Configured Google Docs template ids, one per template kind."""

    adjuster: str | None = None
    admin: str | None = None
    combined: str | None = None


class Settings(BaseSettings):
    """Application configuration loaded from environment variables / .env file."""

    app_name: str = "Contract Desk API"
    app_env: str = "development"

    # Database
    database_url: str = Field(
        default="sqlite+aiosqlite:///./contractdesk_dev.db",
        alias="DATABASE_URL",
    )

    # Identity provider (Supabase GoTrue)
    supabase_url: str | None = Field(default=None, alias="SUPABASE_URL")
    supabase_anon_key: str | None = Field(default=None, alias="SUPABASE_ANON_KEY")
    supabase_service_role_key: str | None = Field(
        default=None, alias="SUPABASE_SERVICE_ROLE_KEY",
    )
    auth_password_pepper: str | None = Field(default=None, alias="AUTH_PASSWORD_PEPPER")
    shadow_email_domain: str = Field(default="internal.local", alias="SHADOW_EMAIL_DOMAIN")

    # Google auth: one of: OAuth refresh triple, static access token, service account
    google_oauth_client_id: str | None = Field(default=None, alias="GOOGLE_OAUTH_CLIENT_ID")
    google_oauth_client_secret: str | None = Field(
        default=None, alias="GOOGLE_OAUTH_CLIENT_SECRET",
    )
    google_oauth_refresh_token: str | None = Field(
        default=None, alias="GOOGLE_OAUTH_REFRESH_TOKEN",
    )
    google_oauth_access_token: str | None = Field(
        default=None, alias="GOOGLE_OAUTH_ACCESS_TOKEN",
    )
    google_service_account_json: str | None = Field(
        default=None, alias="GOOGLE_SERVICE_ACCOUNT_JSON",
    )

    # Google Drive / Sheets / Docs targets
    google_drive_folder_id: str | None = Field(default=None, alias="GOOGLE_DRIVE_FOLDER_ID")
    google_sheet_id: str | None = Field(default=None, alias="GOOGLE_SHEET_ID")
    google_sheet_tab_name: str = Field(default="Sheet1", alias="GOOGLE_SHEET_TAB_NAME")
    google_template_adjuster_doc_id: str | None = Field(
        default=None, alias="GOOGLE_TEMPLATE_ADJUSTER_DOC_ID",
    )
    google_template_admin_doc_id: str | None = Field(
        default=None, alias="GOOGLE_TEMPLATE_ADMIN_DOC_ID",
    )
    google_template_combined_doc_id: str | None = Field(
        default=None, alias="GOOGLE_TEMPLATE_COMBINED_DOC_ID",
    )

    # Outbound HTTP: None means no timeout is imposed by the service
    upstream_timeout: float | None = Field(default=None, alias="UPSTREAM_TIMEOUT")

    cors_allow_methods: list[str] = Field(
        default=["GET", "POST", "PATCH", "DELETE", "OPTIONS"],
        alias="CORS_ALLOW_METHODS",
    )

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "populate_by_name": True,
        "frozen": True,
        "extra": "ignore",
    }

    @property
    def has_google_oauth_refresh(self) -> bool:
        return bool(
            self.google_oauth_client_id
            and self.google_oauth_client_secret
            and self.google_oauth_refresh_token
        )

    @property
    def google_auth_configured(self) -> bool:
        """True when at least one Google credential source is available."""
        return bool(
            self.has_google_oauth_refresh
            or self.google_oauth_access_token
            or self.google_service_account_json
        )

    @property
    def template_ids(self) -> TemplateIds:
        return TemplateIds(
            adjuster=self.google_template_adjuster_doc_id or None,
            admin=self.google_template_admin_doc_id or None,
            combined=self.google_template_combined_doc_id or None,
        )


settings = Settings()


def get_settings() -> Settings:
    """FastAPI dependency returning the process settings; tests override it."""
    return settings
