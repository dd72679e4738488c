"""Domain models for the Notion workspace."""

from dataclasses import dataclass


@dataclass(frozen=True)
class NotionProperty:
    """A database column name and its Notion type."""

    name: str
    type: str


@dataclass(frozen=True)
class NotionDatabaseInfo:
    """Summary of a Notion database used as a food library."""

    title: str
    page_count: int
    properties: list[NotionProperty]


@dataclass(frozen=True)
class NotionSaveResult:
    """Outcome of writing a food to Notion."""

    page_id: str
    food_name: str
