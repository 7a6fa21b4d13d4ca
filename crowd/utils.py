#!/usr/bin/env python3
"""
General utilities for Glyph Crowd.
"""
from typing import Optional


def try_float(val) -> Optional[float]:
    try:
        return float(val)
    except (TypeError, ValueError):
        return None


def try_int(val) -> Optional[int]:
    """Integer value of val, accepting integral floats and numeric strings."""
    number = try_float(val)
    if number is None or number != number or number in (float("inf"), float("-inf")):
        return None
    return int(number)
