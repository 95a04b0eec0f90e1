"""
aiohttp application for the grant directory.

Route order matters: the canonical routes are registered before the legacy
/grants/{state}/... patterns, which would match them too.
"""

import asyncio
from pathlib import Path
from typing import Optional

import aiohttp_jinja2
import jinja2
import structlog
from aiohttp import web

from ..config.loader import Settings
from ..core.slug import grant_path
from ..core.states import state_name_from_code
from ..core.strings import normalize_category
from ..storage import GrantRepository
from . import views

logger = structlog.get_logger(__name__)

WEB_DIR = Path(__file__).parent


def setup_routes(app: web.Application) -> None:
    router = app.router
    router.add_get("/", views.handle_index)
    router.add_get("/health", views.handle_health)
    router.add_get("/sitemap.xml", views.handle_sitemap)
    router.add_get("/api/grants/search", views.handle_search_api)

    router.add_get("/grants", views.handle_grants)
    router.add_get("/grants/federal", views.handle_federal_grants)
    router.add_get("/grants/federal/{slug}", views.handle_grant_detail)
    router.add_get("/grants/private", views.handle_private_grants)
    router.add_get("/grants/private/{slug}", views.handle_grant_detail)
    router.add_get("/grants/state/{state_code}", views.handle_state_grants)
    router.add_get("/grants/state/{state_code}/{slug}", views.handle_grant_detail)
    router.add_get("/grants/local/{state_code}/{city_slug}", views.handle_local_grants)
    router.add_get("/grants/local/{state_code}/{city_slug}/{slug}", views.handle_grant_detail)
    router.add_get("/grants/category/{category_slug}", views.handle_category_grants)
    router.add_get("/grants/category/{category_slug}/{state_code}", views.handle_category_state_grants)
    router.add_get("/grants/{state}", views.handle_legacy_listing)
    router.add_get("/grants/{state}/{city}", views.handle_legacy_listing)
    router.add_get("/grants/{state}/{city}/{category}", views.handle_legacy_listing)
    router.add_get("/grants/{state}/{city}/{category}/{slug}", views.handle_legacy_grant_detail)

    router.add_get("/agencies", views.handle_agencies)
    router.add_get("/agencies/{slug}", views.handle_agency_detail)

    router.add_static("/static", WEB_DIR / "static")


def create_app(repository: GrantRepository, settings: Optional[Settings] = None) -> web.Application:
    """
    Build the web application.

    Args:
        repository: Loaded grant repository
        settings: Site settings (defaults if not given)

    Returns:
        Configured aiohttp Application
    """
    app = web.Application()
    app[views.REPOSITORY_KEY] = repository
    app[views.SETTINGS_KEY] = settings or Settings()

    aiohttp_jinja2.setup(
        app,
        loader=jinja2.FileSystemLoader(str(WEB_DIR / "templates")),
        autoescape=jinja2.select_autoescape(["html"]),
    )
    env = aiohttp_jinja2.get_env(app)
    env.globals["is_date_in_past"] = views.is_date_in_past
    env.globals["grant_path"] = grant_path
    env.globals["state_name"] = state_name_from_code
    env.globals["site_name"] = app[views.SETTINGS_KEY].site_name
    env.filters["category_label"] = normalize_category

    setup_routes(app)
    return app


async def start_web_server(repository: GrantRepository, settings: Settings) -> None:
    """Start the aiohttp server and run until cancelled."""
    app = create_app(repository, settings)

    runner = web.AppRunner(app)
    await runner.setup()
    site = web.TCPSite(runner, settings.host, settings.port)
    await site.start()

    logger.info("web_server_started", host=settings.host, port=settings.port, grants=len(repository))

    try:
        await asyncio.Event().wait()
    finally:
        await runner.cleanup()
