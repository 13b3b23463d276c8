from __future__ import annotations

import asyncio

import pytest

from docstore import InMemoryDocumentStore, Merge, Patch, PatchError, Replace, field_index


def _uids(docs) -> list[int]:
    return [doc["uid"] for doc in docs]


def test_initial_documents_are_sorted():
    async def _run():
        store = InMemoryDocumentStore(documents=[{"uid": 3}, {"uid": 1}, {"uid": 2}])
        assert store.sorted is True
        assert len(store) == 3
        assert 2 in store
        assert _uids(await store.all()) == [1, 2, 3]

    asyncio.run(_run())


def test_update_with_new_key_clears_sorted_flag():
    async def _run():
        store = InMemoryDocumentStore(documents=[{"uid": 1, "a": "x"}])
        await store.update({"uid": 1, "a": "y"})
        assert store.sorted is True

        await store.update({"uid": 0, "a": "z"})
        assert store.sorted is False

    asyncio.run(_run())


def test_bulk_restores_order_after_out_of_order_inserts():
    async def _run():
        store = InMemoryDocumentStore()
        for uid in (5, 2, 9, 1):
            await store.update({"uid": uid})
        assert store.sorted is False

        await store.bulk(Patch().replace(4, {"uid": 4}))
        assert store.sorted is True
        assert _uids(await store.all()) == [1, 2, 4, 5, 9]

        # the hint is now true; a second bulk must still leave things in order
        await store.bulk(Patch().replace(3, {"uid": 3}).replace(10, {"uid": 10}).delete(5))
        assert _uids(await store.all()) == [1, 2, 3, 4, 9, 10]

    asyncio.run(_run())


def test_empty_patch_resets_sorted_flag():
    async def _run():
        store = InMemoryDocumentStore()
        await store.update({"uid": 2})
        await store.update({"uid": 1})
        assert await store.bulk(Patch()) == 0
        assert store.sorted is True
        assert _uids(await store.all()) == [1, 2]

    asyncio.run(_run())


def test_custom_comparator_orders_by_field():
    def by_name(left, right):
        return (left["name"] > right["name"]) - (left["name"] < right["name"])

    async def _run():
        store = InMemoryDocumentStore(comparator=by_name)
        await store.update({"uid": 1, "name": "carol"})
        await store.update({"uid": 2, "name": "alice"})
        await store.bulk(Patch())
        assert _uids(await store.all()) == [2, 1]

        # renaming moves the document even though the hint says "sorted"
        await store.bulk(Patch().merge(2, {"name": Replace("dave")}))
        assert _uids(await store.all()) == [1, 2]

    asyncio.run(_run())


def test_reordering_update_clears_sorted_flag():
    def by_name(left, right):
        return (left["name"] > right["name"]) - (left["name"] < right["name"])

    async def _run():
        docs = [{"uid": 1, "name": "alice"}, {"uid": 2, "name": "bob"}, {"uid": 3, "name": "carol"}]
        store = InMemoryDocumentStore(comparator=by_name, documents=docs)

        await store.update({"uid": 2, "name": "bob", "age": 40})
        assert store.sorted is True

        await store.update({"uid": 1, "name": "zed"})
        assert store.sorted is False

        await store.bulk(Patch().replace(4, {"uid": 4, "name": "dave"}))
        assert [doc["name"] for doc in await store.all()] == ["bob", "carol", "dave", "zed"]

    asyncio.run(_run())


def test_failed_bulk_leaves_store_untouched():
    async def _run():
        store = InMemoryDocumentStore(documents=[{"uid": 1, "b": "world"}])
        patch = Patch([(1, Merge({"b": "pizza"})), (7, Merge({"b": "nope"}))])
        with pytest.raises(PatchError):
            await store.bulk(patch)
        assert (await store.find(1))["b"] == "world"
        assert 7 not in store

    asyncio.run(_run())


def test_find_all_preserves_all_order():
    async def _run():
        by_colour = field_index("colour")
        docs = [{"uid": n, "colour": "red" if n % 2 else "blue"} for n in range(6)]
        store = InMemoryDocumentStore(documents=docs)
        everything = await store.all()
        red = await store.find_all(by_colour, "red")
        assert red == [doc for doc in everything if by_colour("red", doc)]
        assert _uids(red) == [1, 3, 5]

    asyncio.run(_run())


def test_custom_key_function():
    async def _run():
        store = InMemoryDocumentStore(key=lambda doc: doc["name"])
        await store.update({"name": "bob", "age": 40})
        await store.update({"name": "amy", "age": 30})
        assert (await store.find("amy"))["age"] == 30
        await store.bulk(Patch().merge("bob", {"age": 41}))
        assert [doc["name"] for doc in await store.all()] == ["amy", "bob"]
        assert (await store.find("bob"))["age"] == 41

    asyncio.run(_run())
