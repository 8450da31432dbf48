# tests/test_dish_index_service.py
import pytest

from app.services.dish_index_service import (
    REMOTE_MISS_HINT,
    SOURCE_EMBEDDED,
    SOURCE_LOCAL,
    DishIndexService,
    extract_embedded_index,
)
from app.services.local_dish_cache import LocalDishCache
from app.services.menu_view_builder import build_menu_view
from app.tests.fakes import FakeClient
from app.tests.sample_menus import EDITOR_MENU, OMELETTE_ID, SNAPSHOT_MENU, SOUP_ID, UNKNOWN_ID


def remote_client():
    return FakeClient(
        rows={
            "nutritionist_dishes": [{"id": OMELETTE_ID, "title": "Remote omelette"}],
            "recipes": [{"id": "r-1", "dish_id": SOUP_ID, "title": "Remote soup"}],
        }
    )


def test_extract_embedded_index_filters_non_uuid_keys():
    payload = {"dishIndex": {OMELETTE_ID: {"title": "x"}, "legacy": {"title": "y"}, SOUP_ID: "not a record"}}
    assert extract_embedded_index(payload) == {OMELETTE_ID: {"title": "x"}}
    assert extract_embedded_index({"dishIndex": ["x"]}) == {}
    assert extract_embedded_index(None) == {}


@pytest.mark.asyncio
async def test_embedded_index_wins_over_local_and_remote(dish_cache_file):
    svc = DishIndexService(client=remote_client(), local_cache=LocalDishCache(dish_cache_file))
    lookup = await svc.build_index(SNAPSHOT_MENU)
    assert lookup.source == SOURCE_EMBEDDED
    days = build_menu_view(SNAPSHOT_MENU, lookup.index)
    assert days[0].meals[0].dishes[0].name == "Omelette"


@pytest.mark.asyncio
async def test_local_cache_used_before_remote(dish_cache_file):
    client = remote_client()
    svc = DishIndexService(client=client, local_cache=LocalDishCache(dish_cache_file))
    lookup = await svc.build_index(EDITOR_MENU)
    assert lookup.source == SOURCE_LOCAL
    assert set(lookup.index) == {OMELETTE_ID, SOUP_ID}
    assert client.calls == []


@pytest.mark.asyncio
async def test_remote_first_matching_candidate_wins_without_merging(tmp_path):
    client = remote_client()
    svc = DishIndexService(client=client, local_cache=LocalDishCache(tmp_path / "missing.json"))
    lookup = await svc.build_index(EDITOR_MENU)
    assert lookup.source == "nutritionist_dishes.id"
    assert set(lookup.index) == {OMELETTE_ID}


@pytest.mark.asyncio
async def test_remote_failures_fall_through_to_next_candidate():
    client = remote_client()
    client.failures["nutritionist_dishes"] = "permission denied for table nutritionist_dishes"
    svc = DishIndexService(client=client, local_cache=LocalDishCache(None))
    lookup = await svc.build_index({"days": [{"lunch": SOUP_ID}]})
    assert lookup.source == "recipes.dish_id"
    assert lookup.index[SOUP_ID]["title"] == "Remote soup"


@pytest.mark.asyncio
async def test_remote_miss_returns_hint():
    svc = DishIndexService(client=FakeClient(), local_cache=LocalDishCache(None))
    lookup = await svc.build_index({"days": [{"lunch": UNKNOWN_ID}]})
    assert lookup.index == {}
    assert lookup.source is None
    assert lookup.hint == REMOTE_MISS_HINT


@pytest.mark.asyncio
async def test_no_referenced_ids_skips_lookup():
    client = remote_client()
    svc = DishIndexService(client=client, local_cache=LocalDishCache(None))
    lookup = await svc.build_index({"days": [{"lunch": "Soup"}]})
    assert not lookup.found
    assert lookup.hint is None
    assert client.calls == []


@pytest.mark.asyncio
async def test_remote_ids_are_chunked(patch_settings):
    patch_settings.dish_lookup_chunk_size = 2
    seen = []

    async def fetch_rows(table, column, ids):
        seen.append((table, column, list(ids)))
        return [{"id": i, "title": "x"} for i in ids]

    ids = [f"{n:08d}-0000-4000-8000-000000000000" for n in range(5)]
    svc = DishIndexService(fetch_rows=fetch_rows, local_cache=LocalDishCache(None))
    lookup = await svc.fetch_remote(ids)
    assert [len(chunk) for _, _, chunk in seen] == [2, 2, 1]
    assert len(lookup.index) == 5


@pytest.mark.asyncio
async def test_unavailable_client_degrades_to_hint():
    svc = DishIndexService(client=None, local_cache=LocalDishCache(None))
    svc.client = None
    lookup = await svc.build_index(EDITOR_MENU)
    assert lookup.index == {}
    assert lookup.hint == REMOTE_MISS_HINT


def test_local_cache_layouts(tmp_path):
    keyed = tmp_path / "keyed.json"
    keyed.write_text('{"%s": {"title": "Omelette"}}' % OMELETTE_ID, encoding="utf-8")
    broken = tmp_path / "broken.json"
    broken.write_text("{not json", encoding="utf-8")

    assert LocalDishCache(keyed).lookup([OMELETTE_ID]) == {OMELETTE_ID: {"title": "Omelette"}}
    assert LocalDishCache(broken).load() == {}
    assert LocalDishCache(None).lookup([OMELETTE_ID]) == {}
