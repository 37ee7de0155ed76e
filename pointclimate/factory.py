from __future__ import annotations

import random
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from starlette.middleware.trustedhost import TrustedHostMiddleware

from pointclimate.api.router import api_router
from pointclimate.clients.base import ArchiveGateway
from pointclimate.clients.power import PowerClient
from pointclimate.core.config import Settings, load_settings
from pointclimate.core.logging import configure_logging
from pointclimate.services.resolver import TemporalResolver
from pointclimate.services.sampler import AreaSampler
from pointclimate.services.session import MapSession
from pointclimate.services.store import PointStore


def build_map_session(
    settings: Settings,
    gateway: ArchiveGateway,
    *,
    rng: random.Random | None = None,
) -> MapSession:
    rng = rng or random.Random()
    store = PointStore()
    resolver = TemporalResolver(gateway=gateway, max_attempts=settings.resolver_max_attempts)
    sampler = AreaSampler(
        store=store, resolver=resolver, batch_size=settings.area_batch_size, rng=rng
    )
    return MapSession(
        store=store,
        resolver=resolver,
        sampler=sampler,
        click_tolerance=settings.click_tolerance,
        rng=rng,
    )


def create_app(
    settings: Settings | None = None,
    *,
    gateway: ArchiveGateway | None = None,
) -> FastAPI:
    settings = settings or load_settings()
    configure_logging(settings.log_level)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        archive = gateway or PowerClient(
            user_agent=settings.power_user_agent,
            timeout_seconds=settings.power_timeout_seconds,
            base_url=str(settings.power_base_url),
            community=settings.power_community,
            fill_value_default=settings.fill_value_default,
            retry_attempts=settings.power_retry_attempts,
            retry_max_wait_seconds=settings.power_retry_max_wait_seconds,
        )
        app.state.archive_gateway = archive
        app.state.map_session = build_map_session(settings, archive)

        yield
        await app.state.map_session.aclose()
        await archive.aclose()

    docs_enabled = settings.docs_enabled and not settings.is_production
    app = FastAPI(
        title="Point Climate API",
        version="0.1.0",
        debug=settings.debug,
        docs_url="/docs" if docs_enabled else None,
        redoc_url=None,
        openapi_url="/openapi.json" if docs_enabled else None,
        lifespan=lifespan,
    )
    app.state.settings = settings

    app.add_middleware(GZipMiddleware, minimum_size=1024)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=False,
        allow_methods=["GET", "POST", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type"],
    )
    if settings.trusted_hosts:
        app.add_middleware(TrustedHostMiddleware, allowed_hosts=settings.trusted_hosts)

    @app.middleware("http")
    async def security_headers(request, call_next):
        response = await call_next(request)
        response.headers.setdefault("X-Content-Type-Options", "nosniff")
        response.headers.setdefault("X-Frame-Options", "DENY")
        response.headers.setdefault("Referrer-Policy", "no-referrer")
        response.headers.setdefault("Cross-Origin-Opener-Policy", "same-origin")
        response.headers.setdefault("Cross-Origin-Resource-Policy", "same-site")
        if settings.is_production:
            response.headers.setdefault(
                "Strict-Transport-Security", "max-age=31536000; includeSubDomains"
            )
        return response

    @app.get("/", tags=["meta"])
    async def root():
        return {"name": "pointclimate", "status": "ok"}

    app.include_router(api_router)
    return app
