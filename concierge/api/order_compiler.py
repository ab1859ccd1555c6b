"""Order compiler API endpoints."""
import logging
from typing import Any, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Request
from pydantic import Field

from concierge.core.config import settings
from concierge.core.dependencies import get_catalog_repository
from concierge.services.catalog.repository import CatalogRepository
from concierge.services.ordering.exceptions import (
    InvalidRestaurantConfigError,
    NoCandidatesError,
    RestaurantNotFoundError,
    UnparseableRequestError,
)
from concierge.services.ordering.models import (
    CamelModel,
    CompileServerResult,
    Guid,
    OrderCompilerPreview,
)
from concierge.services.ordering.preview import run_order_compiler_preview
from concierge.services.ordering.service import compile_canonical_order_request

router = APIRouter(prefix="/api/order-compiler")
logger = logging.getLogger(__name__)


class RestaurantOptionResponse(CamelModel):
    """Restaurant the compiler can target."""

    restaurant_guid: str
    restaurant_name: str
    hotel_name: Optional[str] = None


class PreviewRequest(CamelModel):
    """Free-text preview request."""

    message: str = Field(min_length=2, max_length=600)
    restaurant_guid: Optional[Guid] = None
    max_candidates: Optional[int] = Field(default=None, ge=1, le=5)


class CompileRequest(CamelModel):
    """Itemized compile request; ``items`` is validated by the compiler."""

    restaurant_guid: str = Field(min_length=1)
    items: Any = None


@router.get("/restaurants", response_model=List[RestaurantOptionResponse])
async def list_restaurants(
    catalog: CatalogRepository = Depends(get_catalog_repository),
):
    """List approved restaurants."""
    try:
        restaurants = await catalog.list_restaurants()
    except Exception as e:
        logger.error(f"[ORDER COMPILER] Error loading restaurants: {type(e).__name__}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to load restaurants")

    logger.info(f"[ORDER COMPILER] Listed {len(restaurants)} restaurants")
    return [
        RestaurantOptionResponse(
            restaurant_guid=restaurant.restaurant_guid,
            restaurant_name=restaurant.name,
            hotel_name=restaurant.hotel_name,
        )
        for restaurant in restaurants
    ]


@router.post("/preview", response_model=OrderCompilerPreview)
async def preview_order(
    request: Request,
    body: PreviewRequest,
    catalog: CatalogRepository = Depends(get_catalog_repository),
):
    """Match a free-text message to menu items and compile the draft."""
    logger.info(
        f"[ORDER COMPILER] Preview requested - scope: {body.restaurant_guid or 'all'}, "
        f"Client: {request.client.host if request.client else 'unknown'}"
    )
    try:
        return await run_order_compiler_preview(
            catalog,
            body.message,
            restaurant_guid=body.restaurant_guid,
            max_candidates=body.max_candidates or settings.max_candidates,
        )
    except NoCandidatesError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except UnparseableRequestError as e:
        raise HTTPException(status_code=422, detail=str(e))
    except Exception as e:
        logger.error(f"[ORDER COMPILER] Preview failed: {type(e).__name__}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to run order compiler preview")


@router.post("/compile", response_model=CompileServerResult)
async def compile_order(
    body: CompileRequest,
    catalog: CatalogRepository = Depends(get_catalog_repository),
):
    """Compile itemized selections against a restaurant's catalog."""
    try:
        return await compile_canonical_order_request(catalog, body.restaurant_guid, body.items)
    except RestaurantNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except InvalidRestaurantConfigError as e:
        raise HTTPException(status_code=422, detail=str(e))
    except Exception as e:
        logger.error(
            f"[ORDER COMPILER] Compile failed - restaurant: {body.restaurant_guid}, "
            f"Error: {type(e).__name__}: {e}",
            exc_info=True,
        )
        raise HTTPException(status_code=500, detail="Failed to compile order")
