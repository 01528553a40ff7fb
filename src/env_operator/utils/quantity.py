"""Kubernetes resource quantity helpers."""

from __future__ import annotations

from decimal import Decimal, InvalidOperation

from kubernetes.utils.quantity import parse_quantity


def parse_or_zero(value: str) -> Decimal:
    """Parse a quantity such as ``"500m"`` or ``"2Gi"``; unparseable input reads as zero."""
    if not value:
        return Decimal(0)
    try:
        return parse_quantity(value)
    except (ValueError, InvalidOperation):
        return Decimal(0)


def equivalent(a: str, b: str) -> bool:
    """True if two quantity strings denote the same amount (``"1000m"`` == ``"1"``)."""
    return parse_or_zero(a) == parse_or_zero(b)
