"""Deterministic derivation of independent sub-seeds from one top-level seed."""

import zlib
import numpy as np

# Stream keys for the stages that consume randomness
SPLIT = 0
FOLDS = 1
SEARCH = 2
FINAL_FIT = 3


def derive_seed(root_seed: int, *keys: int) -> int:
    """
    Derive a 32-bit seed from the root seed and a path of integer keys.

    The same root and keys always give the same seed; different key paths give
    statistically independent streams (numpy SeedSequence spawn keys).
    """
    sequence = np.random.SeedSequence(entropy=int(root_seed), spawn_key=tuple(int(k) for k in keys))
    return int(sequence.generate_state(1, dtype=np.uint32)[0])


def name_key(name: str) -> int:
    """Stable integer key for a model name."""
    return zlib.crc32(name.encode('utf-8'))
