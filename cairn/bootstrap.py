"""Wire an Orchestrator from configuration.

Sets up logging, builds the HTTP backends from the `backends` section and
an in-memory capability store unless one is given:

    from cairn.bootstrap import bootstrap

    ctx = bootstrap()
    session = ctx.orchestrator.new_session()
    outcome = await ctx.orchestrator.send_message(session, "build a full page")
    await ctx.aclose()
"""

from dataclasses import dataclass

import httpx

from cairn.config import get_settings
from cairn.config.settings import Settings
from cairn.observability.logging import get_logger, setup_logging
from cairn.orchestrator import Orchestrator
from cairn.providers.capabilities import CapabilityStore, InMemoryCapabilityStore
from cairn.providers.generation import HttpGenerationBackend
from cairn.providers.scraping import HttpScrapingBackend

logger = get_logger(__name__)


@dataclass
class BootstrapContext:
    """The orchestrator plus the resources that must be closed with it."""

    orchestrator: Orchestrator
    settings: Settings
    generation: HttpGenerationBackend
    scraping: HttpScrapingBackend
    capabilities: CapabilityStore

    async def aclose(self) -> None:
        await self.generation.close()
        await self.scraping.close()


def bootstrap(
    settings: Settings | None = None,
    capabilities: CapabilityStore | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> BootstrapContext:
    """Build a ready-to-use orchestrator.

    Args:
        settings: Settings to use (default: get_settings())
        capabilities: Capability store (default: in-memory)
        transport: httpx transport shared by both backends, for tests
    """
    settings = settings or get_settings()
    log_config = settings.observability.logging
    setup_logging(
        level=log_config.level,
        format=log_config.format,
        redact_pii=log_config.redact_pii,
    )

    backends = settings.backends
    api_key = backends.api_key.get_secret_value() if backends.api_key else None

    def client() -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=backends.timeout_seconds, transport=transport)

    generation = HttpGenerationBackend(
        backends.generation_url,
        api_key=api_key,
        timeout=backends.timeout_seconds,
        client=client(),
    )
    scraping = HttpScrapingBackend(
        backends.scraping_url,
        api_key=api_key,
        timeout=backends.timeout_seconds,
        client=client(),
    )
    if capabilities is None:
        capabilities = InMemoryCapabilityStore()
        logger.warning("capability_store_in_memory", reason="no capability store given")

    orchestrator = Orchestrator.from_settings(settings, generation, scraping, capabilities)
    logger.info(
        "orchestrator_bootstrapped",
        app_name=settings.app_name,
        generation_url=backends.generation_url,
        scraping_url=backends.scraping_url,
    )
    return BootstrapContext(
        orchestrator=orchestrator,
        settings=settings,
        generation=generation,
        scraping=scraping,
        capabilities=capabilities,
    )
