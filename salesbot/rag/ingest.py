"""Seeding pipeline for storing the laptop catalog in the vector index.

Orchestrates:
- Catalog loading
- Listing rendering and id derivation
- Batched embedding generation
- Upsert by id with spacing between batches
"""
import asyncio
from pathlib import Path
from typing import Dict, List, Optional, Protocol, Sequence

import structlog

from salesbot import config
from salesbot.errors import SeedError
from salesbot.rag.catalog import Listing, listing_id, load_catalog, render_listing
from salesbot.rag.documents import IndexRecord, VectorIndex

logger = structlog.get_logger()


class BatchEmbedder(Protocol):
    async def embed_many(self, texts: List[str]) -> List[List[float]]: ...


class CatalogSeeder:
    """Stores catalog listings in the vector index, one batch at a time."""

    def __init__(
        self,
        embedder: BatchEmbedder,
        index: VectorIndex,
        catalog_path: Path = None,
        batch_size: int = None,
        batch_delay: Optional[float] = None,
    ):
        """Initialize the seeder.

        Args:
            embedder: Client exposing async embed_many(texts)
            index: Vector index to upsert into
            catalog_path: JSON catalog file (default from config)
            batch_size: Listings per batch (default from config)
            batch_delay: Seconds to wait between batches (default from config)
        """
        self.embedder = embedder
        self.index = index
        self.catalog_path = catalog_path or config.CATALOG_PATH
        self.batch_size = config.SEED_BATCH_SIZE if batch_size is None else batch_size
        if self.batch_size < 1:
            raise ValueError("batch_size must be at least 1")
        self.batch_delay = config.SEED_BATCH_DELAY if batch_delay is None else batch_delay

    async def seed(self, listings: Optional[Sequence[Listing]] = None) -> Dict[str, int]:
        """Embed and upsert every listing.

        Args:
            listings: Listings to store (loaded from catalog_path if not provided)

        Returns:
            Stats with listings_stored and batches

        Raises:
            SeedError: If loading, embedding or upserting fails
        """
        try:
            if listings is None:
                listings = load_catalog(self.catalog_path)
        except Exception as e:
            logger.error("catalog_load_failed", path=str(self.catalog_path), error=str(e))
            raise SeedError(f"Failed to load catalog: {e}") from e

        stats = {"listings_stored": 0, "batches": 0}

        for start in range(0, len(listings), self.batch_size):
            if start > 0 and self.batch_delay > 0:
                await asyncio.sleep(self.batch_delay)

            batch = listings[start : start + self.batch_size]
            stats["listings_stored"] += await self._store_batch(batch)
            stats["batches"] += 1

            logger.info(
                "catalog_batch_stored",
                batch=stats["batches"],
                batch_size=len(batch),
                stored_total=stats["listings_stored"],
            )

        logger.info("catalog_seeding_completed", **stats)
        return stats

    async def _store_batch(self, batch: Sequence[Listing]) -> int:
        texts = [render_listing(listing) for listing in batch]

        try:
            vectors = await self.embedder.embed_many(texts)
            records = [
                IndexRecord(
                    id=listing_id(listing),
                    content=text,
                    metadata=listing.metadata(),
                    vector=vector,
                )
                for listing, text, vector in zip(batch, texts, vectors)
            ]
            return await self.index.upsert(records)
        except Exception as e:
            logger.error(
                "catalog_batch_failed",
                error=str(e),
                error_type=type(e).__name__,
                first_listing=batch[0].name_en if batch else None,
            )
            raise SeedError(f"Failed to store catalog batch: {e}") from e
