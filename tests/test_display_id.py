import uuid

from essence.core.display_id import display_id, hash_uuid_prefix


def _string_hash_reference(text: str) -> int:
    # s[0]*31^(n-1) + ... + s[n-1], wrapped to signed 32 bits
    total = 0
    for i, ch in enumerate(text):
        total += ord(ch) * 31 ** (len(text) - 1 - i)
    return (total + 2**31) % 2**32 - 2**31


def test_hash_small_inputs():
    assert hash_uuid_prefix("a") == 97
    assert hash_uuid_prefix("ab") == 97 * 31 + 98


def test_hash_only_uses_first_eight_hex_chars():
    a = uuid.UUID("1234abcd-0000-0000-0000-000000000000")
    b = uuid.UUID("1234abcd-ffff-ffff-ffff-ffffffffffff")
    assert hash_uuid_prefix(a) == hash_uuid_prefix(b)
    assert display_id(a) == display_id(b)


def test_hash_matches_wrapped_polynomial():
    for _ in range(50):
        pid = uuid.uuid4()
        prefix = str(pid).replace("-", "")[:8]
        assert hash_uuid_prefix(pid) == _string_hash_reference(prefix)


def test_hash_wraps_to_int32():
    pid = "ffffffff-ffff-ffff-ffff-ffffffffffff"
    value = hash_uuid_prefix(pid)
    assert -(2**31) <= value < 2**31
    assert value == _string_hash_reference("ffffffff")


def test_display_id_is_non_negative_and_stable():
    pid = uuid.uuid4()
    assert display_id(pid) >= 0
    assert display_id(pid) == display_id(str(pid))
    assert display_id(pid) == abs(hash_uuid_prefix(pid))


def test_display_id_falls_back_to_position_when_hash_is_zero():
    assert hash_uuid_prefix("") == 0
    assert display_id("", 0) == 1
    assert display_id("", 4) == 5
