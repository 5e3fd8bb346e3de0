"""PreferredPictures signing service: FastAPI application entry point.

Signs PreferredPictures URLs server-side so pages can embed them without
the account's secret key ever reaching a browser.
"""

from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, Query
from fastapi.responses import JSONResponse, RedirectResponse
from pydantic import BaseModel, Field

from preferred_pictures.client.client import build_choose_url, build_choose_url_legacy
from preferred_pictures.client.errors import TooManyChoicesError
from preferred_pictures.client.models import ChooseRequest, ClientConfig, LegacyChooseRequest
from preferred_pictures.config.settings import get_settings
from preferred_pictures.logging.audit import (
    generate_request_id,
    get_audit_logger,
    request_id_var,
    setup_logging,
)
from preferred_pictures.service.auth import optional_api_key, verify_api_key

VERSION = "0.2.0"


class ChooseBody(BaseModel):
    choices: list[str]
    tournament: str
    ttl: int | None = None
    expiration_ttl: int | None = None
    choices_prefix: str | None = None
    choices_suffix: str | None = None
    destinations: list[str] | None = None
    destinations_prefix: str | None = None
    destinations_suffix: str | None = None
    go: bool = False
    json_response: bool = Field(False, alias="json")
    uid: str | None = None

    model_config = {"populate_by_name": True}


class LegacyChooseBody(BaseModel):
    choices: list[str]
    tournament: str
    ttl: int | None = None
    expiration_ttl: int | None = None
    prefix: str | None = None
    suffix: str | None = None
    uid: str | None = None


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown lifecycle hooks."""
    setup_logging()
    logger = get_audit_logger()
    if not get_settings().preferred_pictures_secret_key:
        logger.warning("PREFERRED_PICTURES_SECRET_KEY is empty, signatures will not verify")
    logger.info("Signing service started")
    yield
    logger.info("Signing service stopped")


app = FastAPI(
    title="PreferredPictures Signing Service",
    description="Builds signed PreferredPictures API URLs",
    version=VERSION,
    lifespan=lifespan,
)


@app.get("/health")
async def health():
    return {"status": "healthy", "version": VERSION}


@app.post("/v1/choose")
async def choose(body: ChooseBody, caller: str = Depends(verify_api_key)):
    settings = get_settings()
    request = ChooseRequest(
        choices=body.choices,
        tournament=body.tournament,
        ttl=settings.default_ttl if body.ttl is None else body.ttl,
        expiration_ttl=(
            settings.default_expiration_ttl
            if body.expiration_ttl is None
            else body.expiration_ttl
        ),
        choices_prefix=body.choices_prefix,
        choices_suffix=body.choices_suffix,
        destinations=body.destinations,
        destinations_prefix=body.destinations_prefix,
        destinations_suffix=body.destinations_suffix,
        go=body.go,
        json=body.json_response,
        uid=body.uid,
    )
    return _sign(caller, "choose", request, build_choose_url)


@app.post("/v1/choose-url")
async def choose_url(body: LegacyChooseBody, caller: str = Depends(verify_api_key)):
    settings = get_settings()
    request = LegacyChooseRequest(
        choices=body.choices,
        tournament=body.tournament,
        ttl=settings.default_ttl if body.ttl is None else body.ttl,
        expiration_ttl=(
            settings.default_expiration_ttl
            if body.expiration_ttl is None
            else body.expiration_ttl
        ),
        prefix=body.prefix,
        suffix=body.suffix,
        uid=body.uid,
    )
    return _sign(caller, "choose-url", request, build_choose_url_legacy)


@app.get("/v1/choose/redirect")
async def choose_redirect(
    tournament: str,
    choices: list[str] = Query(...),
    choices_prefix: str | None = None,
    choices_suffix: str | None = None,
    caller: str = Depends(optional_api_key),
):
    """Redirect straight to a freshly signed /choose URL.

    Lets an <img src> point at this service instead of a pre-signed URL.
    """
    settings = get_settings()
    request = ChooseRequest(
        choices=choices,
        tournament=tournament,
        ttl=settings.default_ttl,
        expiration_ttl=settings.default_expiration_ttl,
        choices_prefix=choices_prefix,
        choices_suffix=choices_suffix,
    )
    result = _sign(caller, "choose", request, build_choose_url)
    if isinstance(result, JSONResponse):
        return result
    return RedirectResponse(result["url"], status_code=302)


def _sign(caller, shape, request, builder):
    logger = get_audit_logger()
    request_id_var.set(generate_request_id())
    config = ClientConfig.from_settings()

    try:
        url = builder(config, request)
    except TooManyChoicesError as exc:
        logger.warning(
            "Too many choices",
            extra={"audit_data": {
                "caller": caller,
                "shape": shape,
                "tournament": request.tournament,
                "choice_count": exc.count,
                "max_choices": exc.limit,
            }},
        )
        return JSONResponse(status_code=400, content={"error": str(exc)})

    logger.info(
        "Signed URL issued",
        extra={"audit_data": {
            "caller": caller,
            "shape": shape,
            "tournament": request.tournament,
            "choice_count": len(request.choices),
        }},
    )
    return {"url": url}
