from __future__ import annotations

import logging
import random
import string

from playwright.async_api import ElementHandle

from ..errors import AddressSpaceExhausted, StampingError

logger = logging.getLogger(__name__)

ADDRESS_ATTRIBUTE = "address"
ADDRESS_ALPHABET = string.ascii_uppercase + string.ascii_lowercase + string.digits
DEFAULT_ADDRESS_LENGTH = 3

# Capacity kept above the element count so redraws stay rare.
_HEADROOM = 4
_MAX_BATCHES = 8

COUNT_SCRIPT = "(root) => root.querySelectorAll('*').length"

STAMP_SCRIPT = """
(root, { addresses, offset, attribute }) => {
    const elements = root.querySelectorAll('*');
    const end = Math.min(elements.length, offset + addresses.length);
    for (let index = offset; index < end; index++) {
        const element = elements[index];
        const className = element.getAttribute('class');
        const id = element.getAttribute('id');
        const href = element.getAttribute('href');
        const keepHref = href && !href.trim().toLowerCase().startsWith('data:');

        for (const attr of Array.from(element.attributes)) {
            element.removeAttribute(attr.name);
        }
        if (className) element.setAttribute('class', className);
        if (id) element.setAttribute('id', id);
        if (keepHref) element.setAttribute('href', href);
        element.setAttribute(attribute, addresses[index - offset]);
    }
    return { stamped: end, total: elements.length };
}
"""


class AddressGenerator:
    """Issue short random addresses, never the same one twice.

    Every address drawn is remembered and a collision triggers a redraw, so
    the addresses handed out by one generator are unique.
    """

    def __init__(self, length: int = DEFAULT_ADDRESS_LENGTH, rng: random.Random | None = None) -> None:
        if length < 1:
            raise ValueError("address length must be positive")
        self._length = length
        self._rng = rng or random.Random()
        self._issued: set[str] = set()

    @classmethod
    def for_population(
        cls,
        count: int,
        min_length: int = DEFAULT_ADDRESS_LENGTH,
        rng: random.Random | None = None,
    ) -> "AddressGenerator":
        length = max(1, min_length)
        while len(ADDRESS_ALPHABET) ** length < count * _HEADROOM:
            length += 1
        return cls(length=length, rng=rng)

    @property
    def length(self) -> int:
        return self._length

    @property
    def capacity(self) -> int:
        return len(ADDRESS_ALPHABET) ** self._length

    @property
    def issued(self) -> frozenset[str]:
        return frozenset(self._issued)

    def next(self) -> str:
        if len(self._issued) >= self.capacity:
            raise AddressSpaceExhausted(
                f"All {self.capacity} addresses of length {self._length} have been issued"
            )
        while True:
            candidate = "".join(self._rng.choice(ADDRESS_ALPHABET) for _ in range(self._length))
            if candidate not in self._issued:
                self._issued.add(candidate)
                return candidate

    def batch(self, count: int) -> list[str]:
        if len(self._issued) + count > self.capacity:
            raise AddressSpaceExhausted(
                f"Cannot issue {count} more addresses of length {self._length}"
            )
        return [self.next() for _ in range(count)]


async def stamp_addresses(
    root: ElementHandle,
    min_length: int = DEFAULT_ADDRESS_LENGTH,
    rng: random.Random | None = None,
) -> int:
    """Reduce every element under ``root`` to class/id/href plus a fresh address.

    Returns the number of stamped elements.
    """

    count = await root.evaluate(COUNT_SCRIPT)
    generator = AddressGenerator.for_population(count, min_length=min_length, rng=rng)

    offset = 0
    pending = count
    for _ in range(_MAX_BATCHES):
        result = await root.evaluate(
            STAMP_SCRIPT,
            {
                "addresses": generator.batch(pending),
                "offset": offset,
                "attribute": ADDRESS_ATTRIBUTE,
            },
        )
        offset = int(result["stamped"])
        pending = int(result["total"]) - offset
        if pending <= 0:
            logger.debug(
                "Stamped addresses",
                extra={"elements": offset, "address_length": generator.length},
            )
            return offset
        logger.info("Subtree grew while stamping", extra={"pending": pending})

    raise StampingError(f"Subtree kept growing while stamping; {pending} elements left without an address")
