"""
Hash Embedding

Deterministic fixed-length feature vectors for the pattern learner.

These are NOT semantic embeddings. Each token is hashed into one of
EMBEDDING_DIM buckets with a hash-derived sign, then the vector is
L2 normalized. The same text always produces the same vector, across
processes and interpreter runs.
"""

import re
import hashlib
from typing import List

import numpy as np

EMBEDDING_DIM = 768

_TOKEN_RE = re.compile(r"\w+", re.UNICODE)


def _tokens(text: str) -> List[str]:
    tokens = _TOKEN_RE.findall(text.lower())
    # Character trigrams keep short or punctuation-only texts distinguishable
    if not tokens and text:
        tokens = [text[i:i + 3] for i in range(max(1, len(text) - 2))]
    return tokens


def hash_embedding(text: str, dim: int = EMBEDDING_DIM) -> np.ndarray:
    """
    Convert text to a deterministic float32 vector.

    Args:
        text: Text to embed
        dim: Vector length

    Returns:
        L2 normalized float32 array of shape (dim,); all zeros for empty text
    """
    vec = np.zeros(dim, dtype=np.float32)

    for token in _tokens(text or ""):
        digest = hashlib.blake2b(token.encode("utf-8"), digest_size=8).digest()
        value = int.from_bytes(digest, "little")
        index = value % dim
        sign = 1.0 if (value >> 63) & 1 == 0 else -1.0
        vec[index] += sign

    norm = float(np.linalg.norm(vec))
    if norm > 0:
        vec /= norm
    return vec
