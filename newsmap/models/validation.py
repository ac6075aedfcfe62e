from typing import List

from pydantic import BaseModel, ConfigDict, Field


class ValidationStats(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    total_url_count: int = Field(alias="totalUrlCount")
    categories_count: int = Field(alias="categoriesCount")
    articles_count: int = Field(alias="articlesCount")
    static_pages_count: int = Field(alias="staticPagesCount")


class ValidationResult(BaseModel):
    """Integrity report over one snapshot of articles and categories.

    ``valid`` is true exactly when ``errors`` is empty; warnings never affect it.
    """

    model_config = ConfigDict(populate_by_name=True)

    valid: bool
    errors: List[str]
    warnings: List[str]
    stats: ValidationStats
