"""Token counting — wraps a tiktoken encoding as a plain ``encode`` callable."""

from __future__ import annotations

from collections.abc import Callable, Sequence
from functools import lru_cache

import tiktoken

DEFAULT_ENCODING = "cl100k_base"

Encoder = Callable[[str], Sequence[int]]


@lru_cache(maxsize=4)
def get_encoder(encoding_name: str = DEFAULT_ENCODING) -> Encoder:
    """Return the ``encode`` function of a tiktoken encoding.

    Loading an encoding is slow the first time, so results are cached per name.
    Special-token markers that appear in source files are encoded as ordinary
    text rather than rejected.
    """
    encoding = tiktoken.get_encoding(encoding_name)

    def encode(text: str) -> Sequence[int]:
        return encoding.encode(text, disallowed_special=())

    return encode


def count_tokens(text: str, encode: Encoder | None = None) -> int:
    """Number of tokens in ``text`` under ``encode`` (default encoding if None)."""
    if not text:
        return 0
    if encode is None:
        encode = get_encoder()
    return len(encode(text))
