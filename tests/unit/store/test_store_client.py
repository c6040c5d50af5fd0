"""Unit tests for the per-table client surface."""

from __future__ import annotations

import asyncio

from store.store_client import StoreClient


def test_latest_order_for_table_scenario(client: StoreClient) -> None:
    """Descending created_at with limit(1) should pick the later table_id=1 order."""

    async def scenario() -> object:
        orders = client.from_("orders")
        for table_id in (1, 1, 2):
            await orders.insert({"table_id": table_id, "customer_name": f"mesa-{table_id}"})
        inserted = (await orders.select()).data
        latest = await (
            orders.select().eq("table_id", 1).order("created_at", ascending=False).limit(1)
        )
        return inserted, latest

    inserted, latest = asyncio.run(scenario())

    assert latest.ok and latest.data == [inserted[1]]


def test_insert_then_select_single_roundtrip(client: StoreClient) -> None:
    """A selected record should equal the input plus id and timestamps."""
    source = {"nome": "Pizza", "preco": 45.0, "ingredientes": ["queijo", "tomate"]}

    async def scenario() -> object:
        inserted = await client.from_("menu_items").insert(source)
        new_id = inserted.data[0]["id"]
        return await client.from_("menu_items").select().eq("id", new_id).single()

    result = asyncio.run(scenario())

    stripped = {
        key: value
        for key, value in result.data.items()
        if key not in ("id", "created_at", "updated_at")
    }
    assert stripped == source


def test_update_eq_changes_only_patched_field(client: StoreClient) -> None:
    """update().eq() should change status and updated_at and nothing else."""

    async def scenario() -> object:
        table = client.from_("orders")
        created = await table.insert([{"status": "confirmado", "total": 30}, {"status": "novo"}])
        before = (await table.select()).data
        await table.update({"status": "pago"}).eq("id", created.data[0]["id"])
        return before, (await table.select()).data

    before, after = asyncio.run(scenario())

    changed = {key for key in after[0] if after[0][key] != before[0].get(key)}
    assert changed == {"status", "updated_at"} and after[1] == before[1]


def test_update_match_and_delete_match(client: StoreClient) -> None:
    """match() variants should apply AND-of-equalities filters."""

    async def scenario() -> object:
        items = client.from_("order_items")
        await items.insert(
            [
                {"order_id": 1, "status": "pendente"},
                {"order_id": 1, "status": "pronto"},
                {"order_id": 2, "status": "pendente"},
            ]
        )
        updated = await items.update({"status": "preparando"}).match(
            {"order_id": 1, "status": "pendente"}
        )
        deleted = await items.delete().match({"order_id": 2})
        return updated, deleted, (await items.select()).data

    updated, deleted, remaining = asyncio.run(scenario())

    assert len(updated.data) == 1 and deleted.ok and deleted.data is None
    assert [row["status"] for row in remaining] == ["preparando", "pronto"]


def test_delete_eq_twice_is_safe(client: StoreClient) -> None:
    """Repeating a delete should produce the same successful result."""

    async def scenario() -> object:
        tables = client.from_("tables")
        await tables.insert({"id": 5, "status": "livre"})
        first = await tables.delete().eq("id", 5)
        second = await tables.delete().eq("id", 5)
        return first, second

    first, second = asyncio.run(scenario())

    assert first == second and first.ok and first.data is None


def test_cross_table_workflow_commits_independently(client: StoreClient) -> None:
    """A two-table workflow should leave the first commit visible on its own."""

    async def scenario() -> object:
        await client.from_("orders").insert({"id": 1, "table_id": 4, "status": "entregue"})
        await client.from_("orders").update({"status": "pago"}).eq("id", 1)
        return await client.from_("tables").select().eq("id", 4).single()

    table_row = asyncio.run(scenario())

    assert table_row.ok and table_row.data is None
    assert client.store.get("orders")[0]["status"] == "pago"
