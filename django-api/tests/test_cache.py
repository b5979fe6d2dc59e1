"""Tests for the DJ token response cache.

Run with: pytest tests/test_cache.py -v
"""

import pytest
from conftest import event_body, submission_body, timeslot_body
from django.core.cache import cache
from django.db import transaction
from rest_framework.test import APIClient

from events.handlers.cache import (
    cache_resolution,
    invalidate_timeslots,
    timeslot_index_key,
    token_cache_key,
)


@pytest.fixture
def published(organizer_client):
    """An event with one timeslot whose link has been opened once."""
    event = organizer_client.post("/api/events", event_body()).data
    timeslot = organizer_client.post(
        f"/api/events/{event['id']}/timeslots", timeslot_body()
    ).data
    token = timeslot["submission_token"]
    assert APIClient().get(f"/api/submit/{token}").status_code == 200
    return event, timeslot, token


class TestCacheKeys:
    def test_token_is_not_stored_in_key(self):
        key = token_cache_key("AbCdEfGh12345678")
        assert "AbCdEfGh12345678" not in key
        assert key.startswith("submit:token:")

    def test_invalidate_follows_index(self):
        cache_resolution("tok", "slot-1", {"cached": True})
        invalidate_timeslots(["slot-1"])
        assert cache.get(token_cache_key("tok")) is None
        assert cache.get(timeslot_index_key("slot-1")) is None

    def test_invalidate_nothing(self):
        cache_resolution("tok", "slot-1", {"cached": True})
        invalidate_timeslots([])
        assert cache.get(token_cache_key("tok")) == {"cached": True}


@pytest.mark.django_db(transaction=True)
class TestTokenCacheInvalidation:
    """Tests for cache invalidation on model changes.

    Invalidation runs on commit, so these tests use real transactions.
    """

    def test_lookup_populates_cache(self, published):
        _, timeslot, token = published
        cached = cache.get(token_cache_key(token))
        assert cached["timeslot"]["id"] == timeslot["id"]
        assert cache.get(timeslot_index_key(timeslot["id"])) == token_cache_key(token)

    def test_cached_response_is_served(self, published):
        _, _, token = published
        cache.set(token_cache_key(token), {"from": "cache"})
        assert APIClient().get(f"/api/submit/{token}").data == {"from": "cache"}

    def test_timeslot_save_invalidates(self, published, organizer_client):
        _, timeslot, token = published
        response = organizer_client.patch(
            f"/api/timeslots/{timeslot['id']}", {"dj_name": "DJ Renamed"}
        )
        assert response.status_code == 200
        assert cache.get(token_cache_key(token)) is None
        fresh = APIClient().get(f"/api/submit/{token}")
        assert fresh.data["timeslot"]["dj_name"] == "DJ Renamed"

    def test_event_save_invalidates(self, published, organizer_client):
        event, _, token = published
        organizer_client.patch(f"/api/events/{event['id']}", {"name": "Moved Night"})
        assert cache.get(token_cache_key(token)) is None
        fresh = APIClient().get(f"/api/submit/{token}")
        assert fresh.data["event"]["name"] == "Moved Night"

    def test_submission_save_invalidates(self, published):
        _, timeslot, token = published
        response = APIClient().put(f"/api/submit/{token}", submission_body(timeslot["id"]))
        assert response.status_code == 201
        assert cache.get(token_cache_key(token)) is None
        fresh = APIClient().get(f"/api/submit/{token}")
        assert fresh.data["existing_submission"]["id"] == response.data["submission"]["id"]

    def test_token_rotation_drops_old_entry(self, published, organizer_client):
        _, timeslot, token = published
        organizer_client.post(f"/api/timeslots/{timeslot['id']}/token")
        assert cache.get(token_cache_key(token)) is None
        assert APIClient().get(f"/api/submit/{token}").status_code == 404

    def test_timeslot_delete_invalidates(self, published, organizer_client):
        _, timeslot, token = published
        organizer_client.delete(f"/api/timeslots/{timeslot['id']}")
        assert APIClient().get(f"/api/submit/{token}").status_code == 404

    def test_entry_cached_before_commit_is_dropped(self, published):
        _, timeslot, token = published
        stale = cache.get(token_cache_key(token))
        assert stale["existing_submission"] is None
        with transaction.atomic():
            response = APIClient().put(f"/api/submit/{token}", submission_body(timeslot["id"]))
            assert response.status_code == 201
            # A reader outside the transaction still sees the old rows.
            cache_resolution(token, timeslot["id"], stale)
            assert cache.get(token_cache_key(token)) == stale
        fresh = APIClient().get(f"/api/submit/{token}")
        assert fresh.data["existing_submission"]["id"] == response.data["submission"]["id"]

    def test_rolled_back_write_keeps_entry(self, published, organizer_client):
        _, timeslot, token = published
        cached = cache.get(token_cache_key(token))
        with pytest.raises(RuntimeError):
            with transaction.atomic():
                organizer_client.patch(f"/api/timeslots/{timeslot['id']}", {"dj_name": "Nope"})
                raise RuntimeError("abort")
        assert cache.get(token_cache_key(token)) == cached
