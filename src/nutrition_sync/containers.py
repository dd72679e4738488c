"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from nutrition_sync.adapters.fdc_client import HttpxFdcClient
from nutrition_sync.adapters.notion_client import HttpxNotionClient
from nutrition_sync.config import Settings, parse_data_types
from nutrition_sync.services.cache import InMemoryCache
from nutrition_sync.services.notion import NotionService
from nutrition_sync.services.nutrition import NutritionService


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    nutrition_service: NutritionService
    notion_service: NotionService
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    fdc_client = HttpxFdcClient.create(
        api_key=resolved_settings.fdc_api_key,
        base_url=resolved_settings.fdc_base_url,
    )
    notion_client = HttpxNotionClient.create(
        api_key=resolved_settings.notion_api_key,
        base_url=resolved_settings.notion_base_url,
        notion_version=resolved_settings.notion_version,
    )
    nutrition_service = NutritionService(
        fdc_client=fdc_client,
        cache=InMemoryCache(),
        default_data_types=tuple(
            parse_data_types(resolved_settings.fdc_default_data_types)
        ),
        debug=resolved_settings.debug,
    )
    notion_service = NotionService(
        notion_client=notion_client,
        default_database_id=resolved_settings.notion_database_id,
    )

    async def close_resources() -> None:
        await fdc_client.close()
        await notion_client.close()

    return AppContainer(
        settings=resolved_settings,
        nutrition_service=nutrition_service,
        notion_service=notion_service,
        close_resources=close_resources,
    )
