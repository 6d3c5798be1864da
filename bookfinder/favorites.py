"""Favorites list persisted to durable storage."""
import json
import logging
from typing import Iterator, List, Optional, Tuple

from bookfinder.config import Config
from bookfinder.models import CatalogRecord, FavoriteRecord
from bookfinder.results import identity_key

logger = logging.getLogger(__name__)


def project(record: CatalogRecord) -> FavoriteRecord:
    """Reduce a catalog record to the fields kept in favorites."""
    return FavoriteRecord(
        key=identity_key(record),
        title=record.title,
        author_name=record.author_name,
        year=record.first_publish_year,
        cover_i=record.cover_i,
    )


class FavoritesStore:
    """
    Saved books, most recently added first.

    Every mutation rewrites the whole list to storage before returning.
    """

    def __init__(self, storage, namespace: str = Config.FAVORITES_KEY):
        """
        Args:
            storage: Object with get_item(key) and set_item(key, value)
            namespace: Storage key holding the serialized list
        """
        self.storage = storage
        self.namespace = namespace
        self._favorites: List[FavoriteRecord] = self.load()

    def load(self) -> List[FavoriteRecord]:
        """Read favorites from storage; anything unreadable counts as empty."""
        try:
            raw = self.storage.get_item(self.namespace)
        except Exception as e:
            logger.warning(f"Could not read favorites: {e}")
            return []

        if not raw:
            return []

        try:
            data = json.loads(raw)
        except ValueError as e:
            logger.warning(f"Corrupt favorites data, starting empty: {e}")
            return []

        if not isinstance(data, list):
            logger.warning("Favorites data is not a list, starting empty")
            return []

        favorites = []
        seen = set()
        for entry in data:
            try:
                favorite = FavoriteRecord.from_dict(entry)
            except ValueError as e:
                logger.warning(f"Skipping favorite: {e}")
                continue
            if favorite.key in seen:
                continue
            seen.add(favorite.key)
            favorites.append(favorite)

        logger.info(f"Loaded {len(favorites)} favorites")
        return favorites

    def persist(self, favorites: Optional[List[FavoriteRecord]] = None) -> None:
        """
        Write the full list to storage, then make it the current list.

        Args:
            favorites: List to write; defaults to the current one

        The in-memory list is only replaced once the write succeeds.
        """
        if favorites is None:
            favorites = self._favorites
        payload = json.dumps([f.to_dict() for f in favorites])
        self.storage.set_item(self.namespace, payload)
        self._favorites = list(favorites)
        logger.debug(f"Persisted {len(favorites)} favorites")

    @property
    def favorites(self) -> Tuple[FavoriteRecord, ...]:
        return tuple(self._favorites)

    def is_favorite(self, record: CatalogRecord) -> bool:
        return identity_key(record) in self

    def toggle_favorite(self, record: CatalogRecord) -> bool:
        """
        Remove the record if saved, otherwise save it at the front.

        Returns:
            True if the record is a favorite afterwards

        Raises:
            whatever the storage raises; the list is then left unchanged
        """
        key = identity_key(record)
        if key in self:
            updated = [f for f in self._favorites if f.key != key]
            added = False
        else:
            updated = [project(record)] + self._favorites
            added = True

        self.persist(updated)
        logger.info(f"{'Added' if added else 'Removed'} favorite: {key}")
        return added

    def remove(self, key: str) -> bool:
        """Remove a favorite by identity key; False if it wasn't saved."""
        if key not in self:
            return False
        self.persist([f for f in self._favorites if f.key != key])
        return True

    def clear(self) -> None:
        self.persist([])

    def __contains__(self, key) -> bool:
        return any(f.key == key for f in self._favorites)

    def __iter__(self) -> Iterator[FavoriteRecord]:
        return iter(tuple(self._favorites))

    def __len__(self) -> int:
        return len(self._favorites)
