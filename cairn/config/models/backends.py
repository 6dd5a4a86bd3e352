"""External backend configuration models."""

from pydantic import BaseModel, Field, SecretStr


class BackendsConfig(BaseModel):
    """Endpoints for the generation and scraping collaborators."""

    generation_url: str = Field(
        default="http://localhost:54321/functions/v1/copilot-action",
        description="Generation endpoint",
    )
    scraping_url: str = Field(
        default="http://localhost:54321/functions/v1/migrate-page",
        description="Scraping/extraction endpoint",
    )
    api_key: SecretStr | None = Field(default=None, description="Bearer token")
    timeout_seconds: float = Field(default=60.0, gt=0, description="Request timeout")
