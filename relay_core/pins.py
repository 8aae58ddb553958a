"""Runner PIN generation."""
from __future__ import annotations

import secrets
from typing import Collection


def generate_pin(taken: Collection[str] = (), digits: int = 6, attempts: int = 1000) -> str:
    """Random numeric PIN not present in `taken` (PINs are unique across runners).

    Raises:
        RuntimeError: if no free PIN was found after `attempts` draws
    """
    if digits < 4:
        raise ValueError("digits must be at least 4")
    low = 10 ** (digits - 1)
    span = 9 * low
    for _ in range(attempts):
        pin = str(low + secrets.randbelow(span))
        if pin not in taken:
            return pin
    raise RuntimeError(f"no free {digits}-digit PIN after {attempts} attempts")
