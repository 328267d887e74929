"""
File-based cache for oracle-recommended locators.

Benefits:
- Cost savings: the same description against the same snippet is asked once
- Manual override: a wrong locator can be fixed by editing its JSON file
- Debugging: audit what the oracle answered
"""

import json
import hashlib
from pathlib import Path
from typing import Optional
from datetime import datetime

from pydantic import ValidationError

from .schemas import LocatorPair
from .logger import get_module_logger

logger = get_module_logger("locator_cache")


class LocatorCache:
    """
    File-based cache of LocatorPair answers.

    One JSON file per (description, snippet) pair, named by a hash of both.
    """

    def __init__(self, cache_dir: Optional[str] = None):
        """
        Args:
            cache_dir: Directory to store cache files.
                      Defaults to ./locator_cache/
        """
        if cache_dir is None:
            cache_dir = Path.cwd() / "locator_cache"

        self.cache_dir = Path(cache_dir)
        self.cache_dir.mkdir(parents=True, exist_ok=True)

        logger.info(f"Locator cache initialized at: {self.cache_dir}")

    def _generate_cache_key(self, description: str, snippet: str) -> str:
        """Hash of the normalized description and the snippet it was asked against."""
        material = f"{description.strip().lower()}\n{snippet}"
        # 16 hex chars (64 bits) is plenty for a per-project cache
        return hashlib.sha256(material.encode('utf-8', errors='replace')).hexdigest()[:16]

    def _cache_file(self, description: str, snippet: str) -> Path:
        return self.cache_dir / f"{self._generate_cache_key(description, snippet)}.json"

    def get(self, description: str, snippet: str) -> Optional[LocatorPair]:
        """Return the cached locator pair, or None on a miss or unreadable entry."""
        cache_file = self._cache_file(description, snippet)

        if not cache_file.exists():
            logger.debug(f"Cache miss for key: {cache_file.stem}")
            return None

        try:
            data = json.loads(cache_file.read_text())
            pair = LocatorPair.model_validate(data['locators'])
            logger.info(f"Cache hit for key: {cache_file.stem}")
            return pair
        except (OSError, KeyError, json.JSONDecodeError, ValidationError) as e:
            logger.warning(f"Failed to load cached locator: {e}")
            return None

    def put(
        self,
        description: str,
        snippet: str,
        locators: LocatorPair,
        extra_info: Optional[dict] = None
    ) -> str:
        """
        Store a locator pair.

        Returns:
            Cache key used
        """
        cache_file = self._cache_file(description, snippet)

        cache_data = {
            "cache_key": cache_file.stem,
            "description": description,
            "created_at": datetime.now().isoformat(),
            "locators": locators.model_dump(mode="json"),
            "extra_info": extra_info or {}
        }

        cache_file.write_text(json.dumps(cache_data, indent=2))
        logger.info(f"Cached locator with key: {cache_file.stem} -> {cache_file}")

        return cache_file.stem

    def exists(self, description: str, snippet: str) -> bool:
        return self._cache_file(description, snippet).exists()

    def delete(self, description: str, snippet: str) -> bool:
        cache_file = self._cache_file(description, snippet)
        if cache_file.exists():
            cache_file.unlink()
            logger.info(f"Deleted cache for key: {cache_file.stem}")
            return True
        return False

    def clear(self) -> int:
        """Clear all cached locators. Returns count of deleted files."""
        count = 0
        for cache_file in self.cache_dir.glob("*.json"):
            cache_file.unlink()
            count += 1
        logger.info(f"Cleared {count} cached locator files")
        return count

    def list_cached(self) -> list[dict]:
        """List all cached entries."""
        entries = []
        for cache_file in sorted(self.cache_dir.glob("*.json")):
            try:
                data = json.loads(cache_file.read_text())
            except (OSError, json.JSONDecodeError) as e:
                logger.warning(f"Skipping unreadable cache file {cache_file}: {e}")
                continue
            entries.append({
                "cache_key": data.get("cache_key"),
                "description": data.get("description"),
                "created_at": data.get("created_at"),
                "file": str(cache_file)
            })
        return entries


_default_cache: Optional[LocatorCache] = None


def get_default_cache() -> LocatorCache:
    """Get or create the default cache instance."""
    global _default_cache
    if _default_cache is None:
        _default_cache = LocatorCache()
    return _default_cache
