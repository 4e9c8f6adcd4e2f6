from modules.auth.models import SignUpProfile
from modules.auth.pending import PendingProfileStore


def make_profile(email: str = "new@example.com") -> SignUpProfile:
    return SignUpProfile(email=email, first_name="Ada", last_name="Lovelace")


class TestPendingProfileStore:
    def test_put_and_get(self, clock):
        store = PendingProfileStore(ttl_seconds=60, clock=clock)
        store.put("id-1", make_profile())
        assert store.get("id-1").first_name == "Ada"
        assert "id-1" in store
        assert len(store) == 1

    def test_unknown_identity(self, clock):
        store = PendingProfileStore(clock=clock)
        assert store.get("missing") is None
        assert "missing" not in store

    def test_empty_store_has_no_entries(self, clock):
        store = PendingProfileStore(clock=clock)
        assert len(store) == 0

    def test_entry_expires_after_ttl(self, clock):
        store = PendingProfileStore(ttl_seconds=60, clock=clock)
        store.put("id-1", make_profile())
        clock.advance(59)
        assert store.get("id-1") is not None
        clock.advance(1)
        assert store.get("id-1") is None
        assert len(store) == 0

    def test_discard(self, clock):
        store = PendingProfileStore(clock=clock)
        store.put("id-1", make_profile())
        store.discard("id-1")
        store.discard("never-there")
        assert "id-1" not in store

    def test_evict_expired_counts(self, clock):
        store = PendingProfileStore(ttl_seconds=10, clock=clock)
        store.put("old-1", make_profile("a@example.com"))
        store.put("old-2", make_profile("b@example.com"))
        clock.advance(5)
        store.put("fresh", make_profile("c@example.com"))
        clock.advance(5)
        assert store.evict_expired() == 2
        assert "fresh" in store

    def test_put_replaces_and_renews(self, clock):
        store = PendingProfileStore(ttl_seconds=10, clock=clock)
        store.put("id-1", make_profile("a@example.com"))
        clock.advance(8)
        store.put("id-1", make_profile("b@example.com"))
        clock.advance(8)
        assert store.get("id-1").email == "b@example.com"
