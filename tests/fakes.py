"""Shared sample data and upstream fakes for Shopbot tests."""

from __future__ import annotations

import math

SAMPLE_KB = """Baan Suan Kitchen
Name: Baan Suan Kitchen
LINE: @baansuan

# Opening Hours
Mon-Fri: 10:00-20:00
Sat-Sun: 09:00-22:00

# Menu
- Pad Thai with shrimp: 89 THB
- Khao soi: 79 THB
![Khao soi](khaosoi.gif)

# Promotion
Buy 2 mango sticky rice, get 1 free every Friday.

# Address
123 Nimman Road, Chiang Mai
Parking: 5 cars in front of the shop.
"""


# -------------------------------------------------------------------------
# Fakes for the upstream API
# -------------------------------------------------------------------------


class FakeEmbedder:
    """Deterministic embedder: chunk texts map to one vector, queries to another.

    Chunk texts (anything starting with ``#`` or containing a newline) embed
    to ``chunk_vector``; everything else is treated as a query and embeds to
    ``query_vector``.
    """

    def __init__(self, query_vector=(1.0, 0.0), chunk_vector=(1.0, 0.0)):
        self.query_vector = list(query_vector) if query_vector is not None else None
        self.chunk_vector = list(chunk_vector) if chunk_vector is not None else None
        self.calls: list[list[str]] = []

    async def embed(self, texts):
        self.calls.append(list(texts))
        return [self.chunk_vector if (t.startswith("#") or "\n" in t) else self.query_vector for t in texts]


def unit_vector_at(similarity: float) -> tuple[float, float]:
    """2-d unit vector whose cosine with (1, 0) is *similarity*."""
    return (similarity, math.sqrt(1.0 - similarity**2))
