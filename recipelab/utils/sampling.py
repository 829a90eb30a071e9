"""
Uniform random sampling for search results.

The catalog returns up to 100 candidates; the UI shows 6 of them. Sampling uses
a partial Fisher-Yates shuffle so every k-subset of the pool is equally likely,
independent of the order the catalog returned them in.
"""

import random
from typing import List, Optional, Sequence, TypeVar

T = TypeVar("T")


def sample_without_replacement(
    items: Sequence[T],
    k: int,
    rng: Optional[random.Random] = None,
) -> List[T]:
    """
    Pick min(k, len(items)) distinct positions of items uniformly at random.

    Only the first k slots of a copy are shuffled: slot i is swapped with a
    uniformly chosen slot in [i, n).

    Args:
        items: Candidate pool (not modified)
        k: Number of items wanted
        rng: Random source (defaults to the module-level random functions)

    Returns:
        New list of the sampled items

    Examples:
        >>> len(sample_without_replacement([1, 2, 3], 5, random.Random(0)))
        3
    """
    if k <= 0:
        return []
    source = rng or random
    pool = list(items)
    n = len(pool)
    k = min(k, n)
    for i in range(k):
        j = source.randrange(i, n)
        pool[i], pool[j] = pool[j], pool[i]
    return pool[:k]
