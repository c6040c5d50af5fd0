"""Integration tests for the file-backed store across client instances."""

from __future__ import annotations

import asyncio
import json

from core.config import CheforgConfig
from store.store_client import StoreClient


def test_rows_survive_new_client_instance(tmp_path) -> None:
    """Rows written by one client should be visible to a fresh client."""
    config = CheforgConfig(data_root=tmp_path)
    writer = StoreClient(config=config)
    inserted = asyncio.run(writer.from_("reservations").insert({"cliente_nome": "Ana"}))

    reader = StoreClient(config=config)
    loaded = asyncio.run(
        reader.from_("reservations").select().eq("id", inserted.data[0]["id"]).single().execute()
    )

    assert loaded.data == inserted.data[0]


def test_table_file_is_one_json_array(tmp_path) -> None:
    """Each table should persist as a single JSON array file."""
    client = StoreClient(config=CheforgConfig(data_root=tmp_path))
    asyncio.run(client.from_("payments").insert([{"valor": 10}, {"valor": 20}]))

    payload = json.loads((tmp_path / "cheforg_payments.json").read_text(encoding="utf-8"))

    assert [row["valor"] for row in payload] == [10, 20]


def test_corrupt_table_file_reads_empty_and_recovers(tmp_path) -> None:
    """A corrupt table file should read as empty and be replaced on next insert."""
    (tmp_path / "cheforg_feedback.json").write_text("{oops", encoding="utf-8")
    client = StoreClient(config=CheforgConfig(data_root=tmp_path))

    before = asyncio.run(client.from_("feedback").select().execute())
    asyncio.run(client.from_("feedback").insert({"estrelas": 5}))
    after = asyncio.run(client.from_("feedback").select().execute())

    assert before.data == [] and len(after.data) == 1
