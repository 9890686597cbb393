"""Tests for catalog seeding."""
import json

import pytest

from conftest import FakeEmbedder, FakeIndex
from salesbot.errors import SeedError
from salesbot.rag import ingest
from salesbot.rag.catalog import listing_id
from salesbot.rag.ingest import CatalogSeeder
from salesbot.rag.store_faiss import FAISSIndex


async def test_seeding_twice_keeps_same_ids(listings):
    """Reseeding upserts by derived id instead of inserting duplicates."""
    index = FAISSIndex()
    seeder = CatalogSeeder(FakeEmbedder(), index, batch_size=3, batch_delay=0)

    first = await seeder.seed(listings)
    ids_after_first = set(index.ids())
    second = await seeder.seed(listings)

    assert first == second == {"listings_stored": 4, "batches": 2}
    assert set(index.ids()) == ids_after_first == {listing_id(l) for l in listings}
    assert await index.count() == len(listings)


async def test_records_carry_text_and_metadata(listings):
    index = FakeIndex()
    await CatalogSeeder(FakeEmbedder(), index, batch_size=20, batch_delay=0).seed(listings)

    stored = index.upserted[listing_id(listings[1])]
    assert stored.content.startswith("Name (AR): لابتوب العاب نافد")
    assert stored.metadata["in_stock"] == 0
    assert stored.metadata["name_en"] == "Gaming RTX sold out"


async def test_sleeps_between_batches_only(listings, monkeypatch):
    delays = []

    async def fake_sleep(seconds):
        delays.append(seconds)

    monkeypatch.setattr(ingest.asyncio, "sleep", fake_sleep)

    stats = await CatalogSeeder(FakeEmbedder(), FakeIndex(), batch_size=1, batch_delay=0.5).seed(listings)

    assert stats["batches"] == 4
    assert delays == [0.5, 0.5, 0.5]


async def test_loads_catalog_file(tmp_path, listings):
    path = tmp_path / "laptops.json"
    path.write_text(json.dumps([l.metadata() for l in listings], ensure_ascii=False), encoding="utf-8")
    index = FakeIndex()

    stats = await CatalogSeeder(FakeEmbedder(), index, catalog_path=path, batch_delay=0).seed()

    assert stats["listings_stored"] == 4
    assert len(index.upserted) == 4


async def test_missing_catalog_raises_seed_error(tmp_path):
    seeder = CatalogSeeder(FakeEmbedder(), FakeIndex(), catalog_path=tmp_path / "nope.json")
    with pytest.raises(SeedError):
        await seeder.seed()


async def test_embedding_failure_raises_seed_error(listings):
    seeder = CatalogSeeder(FakeEmbedder(fail=True), FakeIndex(), batch_delay=0)
    with pytest.raises(SeedError):
        await seeder.seed(listings)


def test_zero_batch_size_is_rejected():
    """An explicit 0 is not swapped for the configured batch size."""
    with pytest.raises(ValueError):
        CatalogSeeder(FakeEmbedder(), FakeIndex(), batch_size=0)


def test_default_batch_size_from_config():
    from salesbot import config

    seeder = CatalogSeeder(FakeEmbedder(), FakeIndex())
    assert seeder.batch_size == config.SEED_BATCH_SIZE
