"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI, HTTPException, Query, Request, status
from fastapi.responses import JSONResponse

from nutrition_sync.api.models import (
    ConvertRequest,
    DualUnitRequest,
    NotionSaveRequest,
    NotionUpdateRequest,
    ScaleRequest,
)
from nutrition_sync.app_logging import configure_logging
from nutrition_sync.config import parse_data_types
from nutrition_sync.containers import AppContainer
from nutrition_sync.domain.errors import (
    InvalidServingSpecification,
    UnsupportedConversion,
)
from nutrition_sync.domain.units import Unit
from nutrition_sync.services.conversion import (
    canonical_unit,
    convert,
    to_imperial,
    to_metric,
)
from nutrition_sync.services.scaling import scale_food_item, with_dual_units


def create_app(container: AppContainer) -> FastAPI:
    """Create a FastAPI app configured with dependencies."""
    configure_logging(container.settings.debug)
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        await app.state.container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    @app.exception_handler(UnsupportedConversion)
    @app.exception_handler(InvalidServingSpecification)
    async def domain_error_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.info("Rejected %s %s: %s", request.method, request.url.path, exc)
        return JSONResponse(
            status_code=422,
            content={"detail": str(exc), "error": type(exc).__name__},
        )

    @app.exception_handler(httpx.HTTPStatusError)
    async def upstream_error_handler(
        request: Request, exc: httpx.HTTPStatusError
    ) -> JSONResponse:
        logger.warning(
            "Upstream %s failed for %s: %s",
            exc.request.url.host,
            request.url.path,
            exc.response.status_code,
        )
        return JSONResponse(
            status_code=status.HTTP_502_BAD_GATEWAY,
            content={
                "detail": "Upstream request failed",
                "upstream_status": exc.response.status_code,
            },
        )

    def _density(requested: float | None) -> float:
        if requested is not None:
            return requested
        return container.settings.default_density

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.get("/units")
    async def units() -> dict[str, object]:
        """List supported units with their family and canonical unit."""
        return {
            "units": [
                {
                    "unit": unit.value,
                    "family": unit.family.value,
                    "canonical": canonical_unit(unit).value,
                }
                for unit in Unit
            ]
        }

    @app.post("/convert")
    async def convert_value(body: ConvertRequest) -> dict[str, object]:
        """Convert a value between two supported units."""
        value = convert(body.value, body.from_unit, body.to_unit, _density(body.density))
        return {"value": value, "unit": body.to_unit.value}

    @app.post("/convert/dual")
    async def convert_dual(body: DualUnitRequest) -> dict[str, object]:
        """Return metric and imperial equivalents for display."""
        return {
            "metric": to_metric(body.value, body.unit),
            "imperial": to_imperial(body.value, body.unit),
        }

    @app.get("/foods/search")
    async def search_foods(
        request: Request,
        query: str = Query(min_length=1),
        data_types: str | None = None,
        page_size: int | None = Query(default=None, ge=1, le=200),
        page: int = Query(default=1, ge=1),
    ) -> dict[str, object]:
        """Search FDC foods."""
        state_container: AppContainer = request.app.state.container
        result = await state_container.nutrition_service.search(
            query,
            data_types=parse_data_types(data_types) or None,
            limit=page_size or state_container.settings.fdc_page_size,
            page=page,
        )
        return {
            "foods": result.foods,
            "total_hits": result.total_hits,
            "current_page": result.current_page,
            "total_pages": result.total_pages,
        }

    @app.get("/foods/{fdc_id}")
    async def food_details(fdc_id: int, request: Request) -> dict[str, object]:
        """Return a processed FDC food with dual-unit serving equivalents."""
        state_container: AppContainer = request.app.state.container
        item = await state_container.nutrition_service.get_food(fdc_id)
        return {"food": with_dual_units(item)}

    @app.post("/foods/scale")
    async def scale_food(body: ScaleRequest) -> dict[str, object]:
        """Rescale a food item to a new serving."""
        scaled = scale_food_item(
            body.food, body.new_quantity, body.new_unit, _density(body.density)
        )
        return {"food": with_dual_units(scaled)}

    @app.post("/notion/pages", status_code=status.HTTP_201_CREATED)
    async def create_notion_page(
        body: NotionSaveRequest, request: Request
    ) -> dict[str, object]:
        """Persist a food item as a new Notion page."""
        state_container: AppContainer = request.app.state.container
        try:
            result = await state_container.notion_service.save_food(
                with_dual_units(body.food),
                database_id=body.database_id,
                serving_label=body.serving_label,
            )
        except ValueError as exc:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)
            ) from exc
        return {
            "success": True,
            "message": "Successfully added to Notion",
            "food_name": result.food_name,
            "page_id": result.page_id,
        }

    @app.patch("/notion/pages/{page_id}")
    async def update_notion_page(
        page_id: str, body: NotionUpdateRequest, request: Request
    ) -> dict[str, object]:
        """Overwrite serving and nutrient columns of an existing page."""
        state_container: AppContainer = request.app.state.container
        await state_container.notion_service.update_food(
            page_id, with_dual_units(body.food), serving_label=body.serving_label
        )
        return {"success": True, "message": "Successfully updated Notion page"}

    @app.get("/notion/pages/{page_id}")
    async def get_notion_page(page_id: str, request: Request) -> dict[str, object]:
        """Return the food item stored on a Notion page."""
        state_container: AppContainer = request.app.state.container
        item = await state_container.notion_service.get_food(page_id)
        return {"food": with_dual_units(item)}

    @app.get("/notion/databases/{database_id}")
    async def notion_database(database_id: str, request: Request) -> dict[str, object]:
        """Return database title, page count and columns."""
        state_container: AppContainer = request.app.state.container
        info = await state_container.notion_service.database_info(database_id)
        return {
            "title": info.title,
            "page_count": info.page_count,
            "properties": info.properties,
        }

    @app.get("/notion/databases/{database_id}/map")
    async def notion_fdc_map(database_id: str, request: Request) -> dict[str, object]:
        """Map FDC ids to Notion page ids for a database."""
        state_container: AppContainer = request.app.state.container
        mapping = await state_container.notion_service.fdc_page_map(database_id)
        return {"map": {str(fdc_id): page_id for fdc_id, page_id in mapping.items()}}

    return app
