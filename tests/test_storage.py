from planit.services.storage import DeviceStorage


async def test_round_trip(storage):
    assert await storage.get_item("k") is None
    assert await storage.set_item("k", "v1") is True
    assert await storage.get_item("k") == "v1"

    await storage.set_item("k", "v2")
    assert await storage.get_item("k") == "v2"


async def test_multi_remove(storage):
    await storage.set_item("a", "1")
    await storage.set_item("b", "2")
    await storage.set_item("c", "3")

    assert await storage.multi_remove(["a", "b"]) is True
    assert await storage.get_item("a") is None
    assert await storage.get_item("b") is None
    assert await storage.get_item("c") == "3"


async def test_failures_read_as_no_data(tmp_path):
    # no init(): the table does not exist
    store = DeviceStorage(f"sqlite+aiosqlite:///{tmp_path / 'missing.db'}")
    try:
        assert await store.get_item("k") is None
        assert await store.set_item("k", "v") is False
        assert await store.remove_item("k") is False
    finally:
        await store.close()
