"""
Fixed daily time slots
"""
from types import MappingProxyType
from typing import Dict, Iterator, List, Mapping, Tuple


class SlotCatalog:
    """Read-only, ordered mapping of slot id -> human readable time range.

    Iteration is always ascending by slot id, whatever order the mapping was
    given in.
    """

    def __init__(self, slots: Mapping[int, str]):
        ordered: Dict[int, str] = {int(k): slots[k] for k in sorted(slots, key=int)}
        self._slots = MappingProxyType(ordered)

    def label(self, slot: int) -> str:
        """Label for a slot, or a synthesized one for unknown ids"""
        return self._slots.get(slot, f"Slot {slot}")

    def ids(self) -> List[int]:
        return list(self._slots)

    def items(self) -> List[Tuple[int, str]]:
        return list(self._slots.items())

    def __contains__(self, slot) -> bool:
        return slot in self._slots

    def __iter__(self) -> Iterator[int]:
        return iter(self._slots)

    def __len__(self) -> int:
        return len(self._slots)


DEFAULT_CATALOG = SlotCatalog({
    1: "9:00 AM - 12:00 PM",
    2: "12:00 PM - 3:00 PM",
    3: "3:00 PM - 6:00 PM",
})
