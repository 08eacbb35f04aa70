from arktx.transaction import ExpirationType


def resolve_expiration(
    type: ExpirationType, value: int, reference_time: int
) -> int:
    """
    Turn an HTLC lock expiration into an absolute value.

    Epoch timestamps below `reference_time` (the current network time)
    are offsets and get `reference_time` added. Block heights are always
    absolute. A `reference_time` of 0, used when the network time could
    not be read, leaves every value unchanged.
    """
    match type:
        case ExpirationType.EPOCH_TIMESTAMP:
            if value < reference_time:
                return value + reference_time
            return value
        case ExpirationType.BLOCK_HEIGHT:
            return value
        case _:
            raise ValueError('Invalid expiration type.')
