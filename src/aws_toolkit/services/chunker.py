"""Split sequences into fixed-size chunks for batch calls."""

from typing import Sequence, TypeVar

from aws_toolkit.models.errors import InvalidArgumentError

T = TypeVar("T")


def chunk(items: Sequence[T], size: int) -> list[list[T]]:
    """
    Split items into contiguous chunks of at most `size` elements.

    Args:
        items: Ordered items to split.
        size: Maximum chunk length.

    Returns:
        Chunks in input order; only the last one may be shorter than `size`.

    Raises:
        InvalidArgumentError: If size is not positive.
    """
    if size <= 0:
        raise InvalidArgumentError(f"chunk size must be positive, got {size}")
    return [list(items[i : i + size]) for i in range(0, len(items), size)]
