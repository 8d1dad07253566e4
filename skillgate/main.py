"""Entry point — starts the aiohttp skill server."""

from __future__ import annotations

from collections.abc import Mapping

from aiohttp import web

from skillgate.config import Settings
from skillgate.skill.payload import SkillRequest
from skillgate.skill.webhooks import SkillApplication, skill_endpoint
from skillgate.utils.logging import get_logger, setup_logging
from skillgate.verification.fetcher import CertificateFetcher
from skillgate.verification.validator import RequestValidator

FETCHER_KEY = web.AppKey("cert_fetcher", CertificateFetcher)


async def health_check(request: web.Request) -> web.Response:
    return web.Response(text="ok")


async def end_session(request: web.Request, skill_request: SkillRequest) -> web.Response:
    """Default skill: acknowledge and close the session."""
    return web.json_response({"version": "1.0", "response": {"shouldEndSession": True}})


async def on_startup(app: web.Application) -> None:
    log = get_logger(__name__)
    log.info("gateway_started", routes=len(app.router.routes()))


async def on_cleanup(app: web.Application) -> None:
    log = get_logger(__name__)
    await app[FETCHER_KEY].close()
    log.info("gateway_stopped")


def create_app(
    settings: Settings,
    applications: Mapping[str, SkillApplication] | None = None,
    fetcher: CertificateFetcher | None = None,
) -> web.Application:
    config = settings.validator_config()
    if applications is None:
        applications = {
            settings.skill_route: SkillApplication(
                handler=end_session,
                application_id=settings.skill_application_id,
            )
        }

    app = web.Application()
    app[FETCHER_KEY] = fetcher or CertificateFetcher(config)
    validator = RequestValidator(config, app[FETCHER_KEY])

    # Lifecycle
    app.on_startup.append(on_startup)
    app.on_cleanup.append(on_cleanup)

    # Routes
    app.router.add_get("/health", health_check)
    for path, application in applications.items():
        app.router.add_post(path, skill_endpoint(validator, application))

    return app


def main() -> None:
    settings = Settings()
    setup_logging(settings.log_level)
    if settings.insecure_skip_verify or settings.dev_bypass:
        get_logger(__name__).warning(
            "request_validation_weakened",
            insecure_skip_verify=settings.insecure_skip_verify,
            dev_bypass=settings.dev_bypass,
        )
    app = create_app(settings)
    web.run_app(app, host=settings.gateway_host, port=settings.gateway_port)


if __name__ == "__main__":
    main()
