import pytest

from planit.services.preferences import Preferences
from planit.services.storage import StorageKeys


async def test_theme_defaults_to_system(storage):
    assert await Preferences(storage).load_theme() == "system"


async def test_theme_persists(storage):
    assert await Preferences(storage).set_theme("dark")

    prefs = Preferences(storage)
    assert await prefs.load_theme() == "dark"
    assert prefs.theme == "dark"


async def test_invalid_stored_theme_falls_back(storage):
    await storage.set_item(StorageKeys.THEME_PREFERENCE, "purple")
    assert await Preferences(storage).load_theme() == "system"


async def test_unknown_theme_is_rejected(storage):
    with pytest.raises(ValueError):
        await Preferences(storage).set_theme("purple")


async def test_map_provider(storage):
    prefs = Preferences(storage)
    assert await prefs.get_map_provider() == "apple"

    await prefs.set_map_provider("google")
    assert await prefs.get_map_provider() == "google"

    with pytest.raises(ValueError):
        await prefs.set_map_provider("bing")


async def test_profile_image(storage):
    prefs = Preferences(storage)
    assert await prefs.get_profile_image() is None

    await prefs.set_profile_image("file:///photos/me.jpg")
    assert await prefs.get_profile_image() == "file:///photos/me.jpg"

    await prefs.set_profile_image(None)
    assert await prefs.get_profile_image() is None
