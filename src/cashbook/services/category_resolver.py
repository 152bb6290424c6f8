"""Category reconciliation.

Maps requested category titles to persisted categories, reusing existing
ones and creating the missing ones exactly once per distinct title. Store
round-trips are bounded per call: one lookup and one batch create, plus one
lookup/create pair per conflict retry.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import TYPE_CHECKING

from cashbook.errors import CategoryConflictError, ConsistencyViolation

if TYPE_CHECKING:
    from cashbook.ledger_store import LedgerStore
    from cashbook.schemas.ledger import Category

logger = logging.getLogger(__name__)


class CategoryResolver:
    """Find-or-create categories by title.

    Usage:
        resolver = CategoryResolver(store)
        mapping = resolver.resolve(["Food", "Work", "Food"])
        mapping["Food"].id
    """

    DEFAULT_CONFLICT_RETRIES = 3

    def __init__(self, store: LedgerStore, conflict_retries: int = DEFAULT_CONFLICT_RETRIES) -> None:
        """Initialize the resolver.

        Args:
            store: Ledger store used for lookups and creation.
            conflict_retries: How many times to re-fetch and retry when a
                concurrent writer created one of the missing titles first.
        """
        self.store = store
        self.conflict_retries = conflict_retries

    def resolve(self, titles: Iterable[str]) -> dict[str, Category]:
        """Resolve every distinct title to exactly one category.

        Args:
            titles: Requested titles; duplicates are expected.

        Returns:
            Mapping of each distinct title to its category.

        Raises:
            CategoryConflictError: Conflicts persisted past the retry budget.
            ConsistencyViolation: A title is still unresolved after creation.
        """
        # dict preserves first-seen order, so new categories are created in arrival order
        distinct = list(dict.fromkeys(titles))
        if not distinct:
            return {}

        resolved = {c.title: c for c in self.store.find_categories_by_titles(set(distinct))}
        missing = [title for title in distinct if title not in resolved]

        logger.debug(
            "Resolving %d distinct categories: %d existing, %d missing",
            len(distinct),
            len(resolved),
            len(missing),
        )

        if missing:
            resolved.update(self._create_missing(missing))

        unresolved = [title for title in distinct if title not in resolved]
        if unresolved:
            raise ConsistencyViolation(
                f"Categories unresolved after reconciliation: {', '.join(unresolved)}"
            )

        return {title: resolved[title] for title in distinct}

    def resolve_one(self, title: str) -> Category:
        """Find or create a single category."""
        return self.resolve([title])[title]

    def _create_missing(self, missing: list[str]) -> dict[str, Category]:
        """Create missing titles in one batch; on conflict adopt the other writer's rows."""
        created: dict[str, Category] = {}
        pending = missing
        attempt = 0

        while True:
            try:
                for category in self.store.create_categories(pending):
                    created[category.title] = category
                logger.info("Created %d new categories", len(pending))
                return created
            except CategoryConflictError as e:
                if attempt >= self.conflict_retries:
                    logger.error(
                        "Category creation still conflicting after %d retries: %s",
                        attempt,
                        e,
                    )
                    raise
                attempt += 1
                logger.warning(
                    "Category creation conflicted (%s); re-fetching (retry %d/%d)",
                    e,
                    attempt,
                    self.conflict_retries,
                )

            # Someone else created some of these; use theirs and retry the rest
            for category in self.store.find_categories_by_titles(set(pending)):
                created[category.title] = category
            pending = [title for title in pending if title not in created]
            if not pending:
                return created
