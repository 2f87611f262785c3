# essence/core/display_id.py
"""
Numeric display ids for products.

The storefront renders products with a small integer id derived from the
product UUID. The value is only for display: it is NOT unique (two UUIDs
can fold to the same number), so write paths always use the UUID.
"""
import uuid

_PREFIX_LEN = 8


def _to_int32(value: int) -> int:
    """Wrap an arbitrary int to a signed 32-bit integer."""
    value &= 0xFFFFFFFF
    if value >= 0x80000000:
        value -= 0x100000000
    return value


def hash_uuid_prefix(product_id: uuid.UUID | str) -> int:
    """
    Fold the first 8 hex chars of a UUID into a signed 32-bit int.

    acc = int32(int32(acc << 5) - acc + ord(ch)) for each char.
    """
    prefix = str(product_id).replace("-", "")[:_PREFIX_LEN]
    acc = 0
    for ch in prefix:
        acc = _to_int32(_to_int32(acc << 5) - acc + ord(ch))
    return acc


def display_id(product_id: uuid.UUID | str, index: int = 0) -> int:
    """
    Return the display id for a product.

    Args:
        product_id: the product's UUID (or its string form).
        index: 0-based position of the row in the list being rendered;
            used as a fallback (index + 1) when the hash folds to 0.
    """
    return abs(hash_uuid_prefix(product_id)) or index + 1
