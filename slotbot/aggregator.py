from __future__ import annotations

from typing import Iterable

from slotbot.domain import FreeSlot, SlotMatrix


def aggregate(slots: Iterable[FreeSlot]) -> tuple[SlotMatrix, int]:
    """Group slots into date -> start label -> set of facilities.

    Returns the matrix and how many slots were fed in. The same
    (date, start, facility) seen twice occupies its cell once.
    """
    matrix: SlotMatrix = {}
    total = 0
    for slot in slots:
        matrix.setdefault(slot.date, {}).setdefault(slot.start, set()).add(slot.facility)
        total += 1
    return matrix, total
