"""
FastAPI application factory.
create_app() is the single entry point for building the app.
"""

from __future__ import annotations

import math
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

import sentry_sdk
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from config import AppSettings
from errors import register_error_handlers
from infrastructure.email.protocol import EmailProvider
from infrastructure.email.zeptomail import ZeptoMailProvider
from infrastructure.http_client import HttpClient
from infrastructure.sms.protocol import SmsProvider
from infrastructure.sms.twilio import TwilioSmsProvider
from infrastructure.storage.protocol import TableStore
from infrastructure.storage.redis_client import create_redis_client, create_table_store
from routes.health_routes import router as health_router
from routes.otp_routes import router as otp_router
from services.otp.dispatcher import OtpDispatcher
from shared.logging import setup_logging


def create_app(
    settings: Optional[AppSettings] = None,
    *,
    table_store: Optional[TableStore] = None,
    email_provider: Optional[EmailProvider] = None,
    sms_provider: Optional[SmsProvider] = None,
) -> FastAPI:
    """Create and return a fully configured FastAPI application.

    The optional collaborators replace the ones built from *settings*; tests
    pass an in-memory store and fake notifiers.
    """
    if settings is None:
        settings = AppSettings()

    setup_logging(settings.logging.log_level, settings.logging.log_format)

    # Initialise Sentry before anything else so it captures startup errors
    if settings.sentry.sentry_dsn:
        sentry_sdk.init(
            dsn=settings.sentry.sentry_dsn,
            send_default_pii=settings.sentry.sentry_send_pii,
            traces_sample_rate=settings.sentry.sentry_traces_sample_rate,
            profiles_sample_rate=settings.sentry.sentry_profile_sample_rate,
        )

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        # ── Startup ──────────────────────────────────────────────────────────
        redis_client = None
        store = table_store
        if store is None:
            # Redis is optional; without it rows live in this process only
            if settings.redis.redis_uri:
                redis_client = await create_redis_client(settings.redis.redis_uri)
            store = await create_table_store(settings.redis, redis_client)

        http_client = HttpClient(timeout=settings.http_timeout_seconds)
        expires_in_minutes = math.ceil(settings.otp.otp_ttl_seconds / 60)
        dispatcher = OtpDispatcher.from_settings(
            settings,
            store,
            email_provider
            or ZeptoMailProvider(
                settings.email,
                http_client,
                app_name=settings.app_name,
                app_url=settings.app_url,
                expires_in_minutes=expires_in_minutes,
            ),
            sms_provider
            or TwilioSmsProvider(
                settings.sms,
                http_client,
                app_name=settings.app_name,
                expires_in_minutes=expires_in_minutes,
            ),
        )

        app.state.settings = settings
        app.state.redis = redis_client
        app.state.table_store = store
        app.state.otp_dispatcher = dispatcher

        yield

        # ── Shutdown ─────────────────────────────────────────────────────────
        await dispatcher.aclose()
        await http_client.aclose()
        await store.aclose()

    app = FastAPI(
        title=settings.app_name,
        version="1.0.0",
        docs_url=settings.docs_url,
        redoc_url=None,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_error_handlers(app)
    app.include_router(health_router)
    app.include_router(otp_router)

    return app
