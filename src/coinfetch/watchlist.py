"""Per-account watchlists kept in a key-value storage.

Each account owns one ordered list of coin ids, stored as a JSON array
under ``watchlist_<account>``. The storage is any mutable mapping of
str to bytes: a plain dict for process-lifetime lists, or
:class:`JsonFileStorage` to keep them on disk.
"""

import json
import logging
from collections.abc import Iterator, MutableMapping
from pathlib import Path

from coinfetch.core.interfaces.serializer import ISerializer
from coinfetch.infrastructure.serializers.json import JsonSerializer, SerializationError

logger = logging.getLogger(__name__)

KEY_PREFIX = "watchlist_"


def watchlist_key(account: str) -> str:
    """Return the storage key of an account's watchlist."""
    return f"{KEY_PREFIX}{account}"


class JsonFileStorage(MutableMapping[str, bytes]):
    """Key-value storage persisted as a single JSON object file.

    Values are UTF-8 text; entries holding anything else are skipped on
    read. The file is rewritten on every change and created on first
    write.
    """

    def __init__(self, path: str | Path, encoding: str = "utf-8") -> None:
        self._path = Path(path)
        self._encoding = encoding

    @property
    def path(self) -> Path:
        return self._path

    def _load(self) -> dict[str, str]:
        if not self._path.exists():
            return {}
        try:
            data = json.loads(self._path.read_text(encoding=self._encoding))
        except (json.JSONDecodeError, UnicodeDecodeError):
            logger.warning("Ignoring unreadable storage file %s", self._path)
            return {}
        if not isinstance(data, dict):
            return {}
        return {key: value for key, value in data.items() if isinstance(value, str)}

    def _dump(self, data: dict[str, str]) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._path.write_text(json.dumps(data, sort_keys=True), encoding=self._encoding)

    def __getitem__(self, key: str) -> bytes:
        return self._load()[key].encode(self._encoding)

    def __setitem__(self, key: str, value: bytes) -> None:
        data = self._load()
        data[key] = value.decode(self._encoding)
        self._dump(data)

    def __delitem__(self, key: str) -> None:
        data = self._load()
        del data[key]
        self._dump(data)

    def __iter__(self) -> Iterator[str]:
        return iter(self._load())

    def __len__(self) -> int:
        return len(self._load())


class WatchlistStore:
    """Ordered, duplicate-free coin id lists keyed by account address."""

    def __init__(
        self,
        storage: MutableMapping[str, bytes] | None = None,
        serializer: ISerializer | None = None,
    ) -> None:
        """Initialize the store.

        Args:
            storage: Backing key-value storage. Defaults to a new dict.
            serializer: Encoder for stored lists. Defaults to JSON.
        """
        self._storage: MutableMapping[str, bytes] = {} if storage is None else storage
        self._serializer = serializer or JsonSerializer()

    def get(self, account: str) -> list[str]:
        """Return an account's watchlist.

        A missing or unreadable entry reads as an empty list.
        """
        raw = self._storage.get(watchlist_key(account))
        if raw is None:
            return []
        try:
            value = self._serializer.deserialize(raw)
        except SerializationError:
            logger.warning("Discarding corrupt watchlist for %s", account)
            return []
        if not isinstance(value, list):
            return []
        return [str(coin_id) for coin_id in value]

    def contains(self, account: str, coin_id: str) -> bool:
        return coin_id in self.get(account)

    def add(self, account: str, coin_id: str) -> list[str]:
        """Append a coin id unless it is already watched.

        Returns:
            The updated watchlist.
        """
        watchlist = self.get(account)
        if coin_id not in watchlist:
            watchlist.append(coin_id)
            self._save(account, watchlist)
        return watchlist

    def remove(self, account: str, coin_id: str) -> list[str]:
        """Remove a coin id, keeping the order of the rest.

        Returns:
            The updated watchlist.
        """
        watchlist = [watched for watched in self.get(account) if watched != coin_id]
        self._save(account, watchlist)
        return watchlist

    def toggle(self, account: str, coin_id: str) -> bool:
        """Add the coin if absent, remove it otherwise.

        Returns:
            True if the coin is watched after the call.
        """
        if self.contains(account, coin_id):
            self.remove(account, coin_id)
            return False
        self.add(account, coin_id)
        return True

    def _save(self, account: str, watchlist: list[str]) -> None:
        self._storage[watchlist_key(account)] = self._serializer.serialize(watchlist)
