from datetime import timedelta

from otp_login.services.otp_store import OtpRecord, OtpStore


def test_put_sets_expiry_from_clock(store, clock):
    store.put("a@b.com", "1234", ttl_seconds=300)
    rec = store.get("a@b.com")
    assert rec == OtpRecord(code="1234", expires_at=clock.now + timedelta(seconds=300))


def test_put_overwrites_previous_record(store):
    store.put("a@b.com", "1234", 300)
    store.put("a@b.com", "5678", 300)
    assert store.get("a@b.com").code == "5678"
    assert len(store) == 1


def test_get_does_not_mutate(store):
    store.put("a@b.com", "1234", 300)
    store.get("a@b.com")
    store.get("a@b.com")
    assert "a@b.com" in store


def test_consume_pops_entry(store):
    store.put("a@b.com", "1234", 300)
    assert store.consume("a@b.com").code == "1234"
    assert store.consume("a@b.com") is None
    assert store.get("a@b.com") is None


def test_delete_is_unconditional(store):
    store.delete("missing@b.com")
    store.put("a@b.com", "1234", 300)
    store.delete("a@b.com")
    assert "a@b.com" not in store


def test_record_expiry_is_strictly_after(clock):
    store = OtpStore(clock=clock)
    store.put("a@b.com", "1234", 300)
    rec = store.get("a@b.com")
    clock.advance(seconds=300)
    assert rec.is_expired(clock.now) is False
    clock.advance(microseconds=1)
    assert rec.is_expired(clock.now) is True


def test_expired_entries_are_not_swept(store, clock):
    store.put("a@b.com", "1234", 1)
    clock.advance(hours=1)
    # expiry is the caller's call; the store just keeps the record
    assert store.get("a@b.com") is not None
