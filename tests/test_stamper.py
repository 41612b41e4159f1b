from __future__ import annotations

import random
from dataclasses import dataclass, field
from typing import Any

import pytest

from pagequery.dom.stamper import (
    ADDRESS_ALPHABET,
    COUNT_SCRIPT,
    STAMP_SCRIPT,
    AddressGenerator,
    stamp_addresses,
)
from pagequery.errors import AddressSpaceExhausted, StampingError


class ScriptedRandom:
    def __init__(self, picks: list[str]) -> None:
        self._picks = list(picks)

    def choice(self, seq: str) -> str:
        return self._picks.pop(0)


@dataclass
class DummyRoot:
    """Element handle whose subtree is a flat list of attribute dicts."""

    elements: list[dict[str, str]]
    grow_after_count: int = 0
    grow_forever: bool = False
    calls: list[tuple[str, Any]] = field(default_factory=list)

    async def evaluate(self, script: str, arg: Any = None) -> Any:
        if script == COUNT_SCRIPT:
            self.calls.append(("count", None))
            count = len(self.elements)
            self.elements.extend({} for _ in range(self.grow_after_count))
            return count
        assert script == STAMP_SCRIPT
        self.calls.append(("stamp", arg))
        offset = arg["offset"]
        end = min(len(self.elements), offset + len(arg["addresses"]))
        for index in range(offset, end):
            element = self.elements[index]
            kept = {name: element[name] for name in ("class", "id") if element.get(name)}
            href = element.get("href")
            if href and not href.lower().startswith("data:"):
                kept["href"] = href
            kept[arg["attribute"]] = arg["addresses"][index - offset]
            self.elements[index] = kept
        if self.grow_forever:
            self.elements.append({})
        return {"stamped": end, "total": len(self.elements)}


def test_generator_issues_unique_fixed_length_addresses() -> None:
    generator = AddressGenerator(length=3, rng=random.Random(7))
    addresses = generator.batch(5000)

    assert len(set(addresses)) == 5000
    assert all(len(address) == 3 for address in addresses)
    assert all(set(address) <= set(ADDRESS_ALPHABET) for address in addresses)
    assert generator.capacity == 62**3


def test_generator_redraws_on_collision() -> None:
    generator = AddressGenerator(length=1, rng=ScriptedRandom(["A", "A", "A", "B"]))
    assert generator.next() == "A"
    assert generator.next() == "B"
    assert generator.issued == frozenset({"A", "B"})


def test_generator_refuses_to_exceed_capacity() -> None:
    generator = AddressGenerator(length=1, rng=random.Random(1))
    assert len(set(generator.batch(62))) == 62
    with pytest.raises(AddressSpaceExhausted):
        generator.next()
    with pytest.raises(AddressSpaceExhausted):
        AddressGenerator(length=1).batch(63)


def test_generator_widens_for_large_populations() -> None:
    assert AddressGenerator.for_population(500).length == 3
    assert AddressGenerator.for_population(100_000).length == 4
    assert AddressGenerator.for_population(10, min_length=5).length == 5


@pytest.mark.asyncio
async def test_stamp_keeps_only_class_id_href() -> None:
    root = DummyRoot(
        elements=[
            {"class": "x", "href": "data:image/png;base64,AAAA", "style": "color:red"},
            {"id": "main", "href": "/about", "data-test": "1", "onclick": "go()"},
            {"role": "button"},
        ]
    )

    stamped = await stamp_addresses(root, rng=random.Random(3))

    assert stamped == 3
    first, second, third = root.elements
    assert set(first) == {"class", "address"} and first["class"] == "x"
    assert set(second) == {"id", "href", "address"} and second["href"] == "/about"
    assert set(third) == {"address"}
    addresses = [element["address"] for element in root.elements]
    assert len(set(addresses)) == 3
    assert all(len(address) == 3 for address in addresses)


@pytest.mark.asyncio
async def test_stamp_covers_elements_added_mid_pass() -> None:
    root = DummyRoot(elements=[{} for _ in range(4)], grow_after_count=2)

    stamped = await stamp_addresses(root, rng=random.Random(11))

    assert stamped == 6
    stamp_calls = [arg for kind, arg in root.calls if kind == "stamp"]
    assert [call["offset"] for call in stamp_calls] == [0, 4]
    assert [len(call["addresses"]) for call in stamp_calls] == [4, 2]
    addresses = [element["address"] for element in root.elements]
    assert len(set(addresses)) == 6


@pytest.mark.asyncio
async def test_stamp_gives_up_on_endlessly_growing_subtree() -> None:
    root = DummyRoot(elements=[{}], grow_forever=True)
    with pytest.raises(StampingError):
        await stamp_addresses(root, rng=random.Random(5))


@pytest.mark.asyncio
async def test_stamp_empty_subtree() -> None:
    root = DummyRoot(elements=[])
    assert await stamp_addresses(root) == 0
