"""Site migration and capability configuration models."""

from pydantic import BaseModel, Field

DEFAULT_PLATFORM_MODULES: dict[str, list[str]] = {
    "wordpress": ["blog", "forms", "newsletter"],
    "woocommerce": ["products", "orders", "blog", "newsletter"],
    "shopify": ["products", "orders", "newsletter"],
    "wix": ["forms", "bookings", "blog"],
    "squarespace": ["blog", "newsletter", "forms"],
}

DEFAULT_BLOCK_MODULES: dict[str, str] = {
    "booking": "bookings",
    "smart-booking": "bookings",
    "article-grid": "blog",
    "kb-hub": "knowledgeBase",
    "kb-featured": "knowledgeBase",
    "kb-search": "knowledgeBase",
    "kb-accordion": "knowledgeBase",
    "chat": "chat",
    "newsletter": "newsletter",
    "products": "products",
    "cart": "orders",
    "pricing": "products",
    "comparison": "products",
    "form": "forms",
    "contact": "forms",
}


class MigrationConfig(BaseModel):
    """Migration State Machine configuration."""

    edit_prompt_template: str = Field(
        default="Modify the {block_type} section: {feedback}",
        description="Prompt used to revise the block under review",
    )
    max_discovered_links: int = Field(
        default=50, ge=0, description="Links kept from a single page"
    )
    suggest_platform_modules: bool = Field(
        default=True,
        description="Enable platform capabilities when a platform is detected",
    )
    platform_modules: dict[str, list[str]] = Field(
        default_factory=lambda: {k: list(v) for k, v in DEFAULT_PLATFORM_MODULES.items()},
        description="Detected platform -> capability ids",
    )
    default_platform_modules: list[str] = Field(
        default_factory=lambda: ["forms", "newsletter"],
        description="Capabilities for a recognised but unmapped platform",
    )


class CapabilitiesConfig(BaseModel):
    """Capability auto-enable configuration."""

    auto_enable: bool = Field(
        default=True, description="Enable a block's capability when it is approved"
    )
    block_modules: dict[str, str] = Field(
        default_factory=lambda: dict(DEFAULT_BLOCK_MODULES),
        description="Block type -> capability id",
    )
