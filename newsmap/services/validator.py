"""Cross-referential integrity checks over the articles and categories snapshots.

Findings are accumulated, never raised.  Blocking problems go to ``errors``:

- a published article or a category without a slug,
- a category whose ``parent_id`` points at no existing category,
- every repeat of an article slug, and every repeat of a category slug
  (the two slug namespaces are independent).

Non-blocking problems go to ``warnings``: published articles without a
canonical URL, and categories whose parent chain loops back on itself.
"""

from typing import Dict, Iterable, List, Optional, Sequence, Set

from newsmap.config import SitemapConfig
from newsmap.models.article import Article
from newsmap.models.category import Category
from newsmap.models.slug import normalize_slug
from newsmap.models.validation import ValidationResult, ValidationStats


def _duplicates(slugs: Iterable[str]) -> List[str]:
    """Return every slug occurrence past the first, in input order."""
    seen: Set[str] = set()
    repeats: List[str] = []
    for slug in slugs:
        if not slug:
            continue
        if slug in seen:
            repeats.append(slug)
        seen.add(slug)
    return repeats


def find_parent_cycles(categories: Sequence[Category]) -> List[Category]:
    """Return the categories that sit on a loop of ``parent_id`` references.

    Dangling parents end a chain; they are reported separately as errors.
    """
    parent_of: Dict[str, Optional[str]] = {c.id: c.parent_id for c in categories}
    on_cycle: Set[str] = set()
    settled: Set[str] = set()

    for category in categories:
        path: List[str] = []
        index: Dict[str, int] = {}
        current: Optional[str] = category.id
        while current is not None and current in parent_of and current not in settled:
            if current in index:
                on_cycle.update(path[index[current]:])
                break
            index[current] = len(path)
            path.append(current)
            current = parent_of[current]
        settled.update(path)

    return [c for c in categories if c.id in on_cycle]


class IntegrityValidator:
    def __init__(self, config: SitemapConfig) -> None:
        self.config = config

    def validate(self, articles: Iterable[Article], categories: Iterable[Category]) -> ValidationResult:
        published = [a for a in articles if a.published]
        categories = list(categories)
        errors: List[str] = []
        warnings: List[str] = []

        for article in published:
            if not normalize_slug(article.slug):
                errors.append(f"Article {article.id} is missing a slug")
            if not article.canonical_url:
                warnings.append(f"Article {normalize_slug(article.slug) or article.id} is missing canonical URL")

        category_ids = {c.id for c in categories}
        for category in categories:
            if not normalize_slug(category.slug):
                errors.append(f"Category {category.id} is missing a slug")
            if category.parent_id and category.parent_id not in category_ids:
                errors.append(
                    f"Category {normalize_slug(category.slug) or category.id} has invalid parent_id "
                    f"{category.parent_id}"
                )

        for slug in _duplicates(normalize_slug(a.slug) for a in published):
            errors.append(f"Duplicate article slug: {slug}")
        for slug in _duplicates(normalize_slug(c.slug) for c in categories):
            errors.append(f"Duplicate category slug: {slug}")

        for category in find_parent_cycles(categories):
            warnings.append(f"Category {normalize_slug(category.slug) or category.id} is part of a parent cycle")

        static_count = len(self.config.static_pages)
        stats = ValidationStats(
            total_url_count=len(published) + len(categories) + static_count,
            categories_count=len(categories),
            articles_count=len(published),
            static_pages_count=static_count,
        )
        return ValidationResult(valid=not errors, errors=errors, warnings=warnings, stats=stats)
