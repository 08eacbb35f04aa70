from arktx.expiration import resolve_expiration
from arktx.transaction import ExpirationType

import pytest


def test_epoch_timestamp_offset():
    assert resolve_expiration(ExpirationType.EPOCH_TIMESTAMP, 416, 1_000_000) == 1_000_416


def test_epoch_timestamp_absolute():
    assert resolve_expiration(ExpirationType.EPOCH_TIMESTAMP, 2_000_000, 1_000_000) == 2_000_000
    assert resolve_expiration(ExpirationType.EPOCH_TIMESTAMP, 1_000_000, 1_000_000) == 1_000_000


def test_epoch_timestamp_without_network_time():
    assert resolve_expiration(ExpirationType.EPOCH_TIMESTAMP, 416, 0) == 416


def test_block_height_unchanged():
    assert resolve_expiration(ExpirationType.BLOCK_HEIGHT, 416, 1_000_000) == 416
    assert resolve_expiration(ExpirationType.BLOCK_HEIGHT, 2_000_000, 1_000_000) == 2_000_000


def test_invalid_type():
    with pytest.raises(ValueError):
        resolve_expiration(3, 416, 1_000_000)
