"""
Catalog Models

Book record as stored by the catalog. Only title, author and genre are
searchable; the rest rides along in search results.
"""

from pydantic import BaseModel, ConfigDict, Field

SEARCHABLE_FIELDS: tuple[str, ...] = ("title", "author", "genre")


class Book(BaseModel):
    """A catalog book."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str = Field(..., min_length=1, description="Stable catalog identifier")
    title: str = Field(..., min_length=1, max_length=200)
    author: str = Field(..., min_length=1, max_length=100)
    genre: str = Field(..., min_length=1, max_length=50)
    published_year: int | None = Field(default=None, alias="publishedYear")
    isbn: str | None = Field(default=None, max_length=20)
    stock_count: int = Field(default=0, ge=0, alias="stockCount")

    def searchable_fields(self) -> dict[str, str]:
        """Text fields exposed to the search index."""
        return {name: getattr(self, name) for name in SEARCHABLE_FIELDS}
