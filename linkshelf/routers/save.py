import logging

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse
from slowapi import Limiter
from slowapi.util import get_remote_address

from linkshelf.config import settings
from linkshelf.deps import get_current_owner, get_html_fetcher, get_oembed_fetcher, get_store
from linkshelf.models.item import StoredItem
from linkshelf.models.request import ManualAddRequest, SaveRequest
from linkshelf.models.response import ErrorResponse, ExistingItemResponse, ItemSummary
from linkshelf.services.fetcher import Fetcher
from linkshelf.services.saver import SaveOutcome, save_url
from linkshelf.services.store import ItemStore

logger = logging.getLogger(__name__)

limiter = Limiter(key_func=get_remote_address)
router = APIRouter(tags=["Items"])

_ERROR_RESPONSES = {
    200: {"model": ExistingItemResponse, "description": "The URL is already saved."},
    400: {"model": ErrorResponse},
    401: {"model": ErrorResponse},
}


def _existing(outcome: SaveOutcome) -> JSONResponse:
    body = ExistingItemResponse(id=outcome.item.id, status=outcome.item.status)
    return JSONResponse(status_code=status.HTTP_200_OK, content=body.model_dump(mode="json"))


@router.post(
    "/save",
    response_model=StoredItem,
    status_code=status.HTTP_201_CREATED,
    responses=_ERROR_RESPONSES,
    summary="Save a URL to the reading list",
)
@limiter.limit(settings.save_rate_limit)
async def save(
    request: Request,
    body: SaveRequest,
    owner_id: str = Depends(get_current_owner),
    store: ItemStore = Depends(get_store),
    html_fetcher: Fetcher = Depends(get_html_fetcher),
    oembed_fetcher: Fetcher = Depends(get_oembed_fetcher),
) -> StoredItem | JSONResponse:
    """Extract metadata for *url* and store it, unless the owner already saved it.

    Returns the stored item with ``201``, or an "already exists" body with
    ``200`` when the raw, cleaned or canonical URL matches an existing item.
    """
    logger.info(
        "Save request received",
        extra={"url": body.url, "source_client": body.source_client},
    )
    outcome = await save_url(
        owner_id,
        body.url,
        store,
        html_fetcher,
        oembed_fetcher,
        source_client=body.source_client,
        source_platform=body.source_platform,
    )
    if outcome.existing:
        return _existing(outcome)
    return outcome.item


@router.post(
    "/items/manual",
    response_model=ItemSummary,
    status_code=status.HTTP_201_CREATED,
    responses=_ERROR_RESPONSES,
    summary="Add a URL manually from the app",
)
@limiter.limit(settings.save_rate_limit)
async def add_item_manual(
    request: Request,
    body: ManualAddRequest,
    owner_id: str = Depends(get_current_owner),
    store: ItemStore = Depends(get_store),
    html_fetcher: Fetcher = Depends(get_html_fetcher),
    oembed_fetcher: Fetcher = Depends(get_oembed_fetcher),
) -> ItemSummary | JSONResponse:
    logger.info("Manual add request received", extra={"url": body.url})
    outcome = await save_url(
        owner_id,
        body.url,
        store,
        html_fetcher,
        oembed_fetcher,
        source_client="app_manual",
        source_platform="flutter_app",
    )
    if outcome.existing:
        return _existing(outcome)
    return ItemSummary.model_validate(outcome.item.model_dump())
