"""Prometheus metrics for orchestration activity."""

from prometheus_client import Counter

GENERATION_REQUESTS = Counter(
    "cairn_generation_requests_total",
    "Generation backend requests by outcome",
    labelnames=["outcome"],
)

SCRAPE_REQUESTS = Counter(
    "cairn_scrape_requests_total",
    "Scraping backend requests by outcome",
    labelnames=["outcome"],
)

BLOCKS_CREATED = Counter(
    "cairn_blocks_created_total",
    "Blocks added to a block queue",
    labelnames=["block_type", "origin"],
)

AUTO_CONTINUE_STEPS = Counter(
    "cairn_auto_continue_steps_total",
    "Scheduled continuations by what happened when they fired",
    labelnames=["result"],
)

MIGRATION_PAGES = Counter(
    "cairn_migration_pages_total",
    "Pages fully reviewed during a migration",
    labelnames=["phase"],
)

RECOMMENDATIONS = Counter(
    "cairn_recommendations_total",
    "Module recommendations by resulting status",
    labelnames=["status"],
)

SITE_ANALYSES = Counter(
    "cairn_site_analyses_total",
    "Whole-site analyses by outcome",
    labelnames=["outcome"],
)
