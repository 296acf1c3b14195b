import json
from datetime import datetime, timedelta
import pytest
import pytz

from helpers import UnavailableStore
from lunchbox.models.profile import Interests, UserProfile
from lunchbox.services.profile_service import PROFILE_STORAGE_KEY, ProfileStore
from lunchbox.storage import ClientStorage

@pytest.fixture
def interests():
    return Interests(sports=True, socializing=False, gaming=True, other_interests=["reading"])

def test_load_without_profile(profile_store):
    assert profile_store.load() is None
    assert profile_store.is_onboarding_complete() is False
    assert profile_store.get_interests() is None

def test_complete_onboarding_saves_profile(profile_store, storage, interests):
    profile = profile_store.complete_onboarding(interests)

    assert profile.onboarding_complete is True
    assert profile.interests == interests
    assert profile.created_at <= profile.last_active

    loaded = profile_store.load()
    assert loaded == profile
    assert profile_store.is_onboarding_complete() is True
    assert profile_store.get_interests() == interests

def test_profile_is_stored_as_camel_case_json(profile_store, storage, interests):
    profile_store.complete_onboarding(interests)
    raw = json.loads(storage.get(PROFILE_STORAGE_KEY))

    assert raw["onboardingComplete"] is True
    assert raw["interests"]["otherInterests"] == ["reading"]
    assert "createdAt" in raw and "lastActive" in raw

def test_save_stamps_last_active(profile_store, interests):
    stale = datetime.now(pytz.UTC) - timedelta(days=3)
    profile = UserProfile(interests=interests, created_at=stale, last_active=stale)

    saved = profile_store.save(profile)

    assert saved.last_active > stale
    assert saved.created_at == stale

def test_update_merges_fields(profile_store, interests):
    original = profile_store.complete_onboarding(interests)

    updated = profile_store.update({"email": "kid@example.com"})

    assert updated.email == "kid@example.com"
    assert updated.interests == interests
    assert updated.created_at == original.created_at
    assert updated.last_active >= original.last_active
    assert profile_store.load().email == "kid@example.com"

def test_update_accepts_camel_case_keys(profile_store, interests):
    profile_store.complete_onboarding(interests)
    updated = profile_store.update({"externalId": "discord-42"})
    assert updated.external_id == "discord-42"

def test_update_replaces_nested_interests_wholesale(profile_store, interests):
    profile_store.complete_onboarding(interests)
    updated = profile_store.update({"interests": {"sports": False}})
    assert updated.interests == Interests(sports=False)

def test_update_without_profile_returns_none(profile_store):
    assert profile_store.update({"email": "kid@example.com"}) is None

def test_add_connection(profile_store, interests):
    assert profile_store.add_connection("email", "kid@example.com") is None

    profile_store.complete_onboarding(interests)
    assert profile_store.add_connection("email", "kid@example.com").email == "kid@example.com"
    assert profile_store.add_connection("discord", "1234").external_id == "1234"

    with pytest.raises(ValueError):
        profile_store.add_connection("phone", "555-0100")

def test_clear_removes_profile(profile_store, interests):
    profile_store.complete_onboarding(interests)
    profile_store.clear()
    assert profile_store.load() is None

@pytest.mark.parametrize("stored", [
    "{not json",
    json.dumps({"interests": {"sports": "maybe"}}),
    json.dumps([1, 2, 3]),
])
def test_unreadable_profile_fails_soft(profile_store, storage, stored):
    """Corrupt storage is treated as no profile so onboarding starts over."""
    storage.set(PROFILE_STORAGE_KEY, stored)
    assert profile_store.load() is None
    assert profile_store.is_onboarding_complete() is False

def test_profiles_are_scoped_per_client(store, interests):
    first = ProfileStore(ClientStorage(store, "client_a"))
    second = ProfileStore(ClientStorage(store, "client_b"))

    first.complete_onboarding(interests)

    assert first.load() is not None
    assert second.load() is None

def test_unavailable_storage_reads_as_no_profile():
    profile_store = ProfileStore(ClientStorage(UnavailableStore(), "client_a"))

    assert profile_store.load() is None
    assert profile_store.is_onboarding_complete() is False
    assert profile_store.update({"email": "kid@example.com"}) is None
