"""
Shared fixtures for the PixelPets test suite.

Provides a controllable millisecond clock, a seeded RNG, and a factory for
game controllers built on a stub catalog (no display or assets required).
"""

import random
from typing import List

import pytest

from pixelpets_model import Plant
from pixelpets_game import GameState, PixelPetsGame


class FakeClock:
    """Monotonic millisecond clock that only moves when told to."""

    def __init__(self, now: int = 1000):
        self.now = now

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int):
        self.now += ms


class FixedOfferRandom(random.Random):
    """Random whose randint always returns a chosen value."""

    def __init__(self, value: int, seed: int = 7):
        super().__init__(seed)
        self.value = value

    def randint(self, a, b):
        return self.value


def make_plants(count: int) -> List[Plant]:
    return [
        Plant(name=f"Plant {n}", sprite_path=f"assets/plant_{n}.png", sprite=f"sprite-{n}")
        for n in range(1, count + 1)
    ]


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def rng():
    return random.Random(1234)


@pytest.fixture
def released():
    return []


@pytest.fixture
def make_game(clock, rng, released):
    """Build a controller; `owned` puts the player straight into PLANT_VIEW."""

    def _make(count=8, guided=True, owned=None, selected=None, rng_override=None, hour=12):
        game = PixelPetsGame(
            make_plants(count),
            guided=guided,
            clock=clock,
            hour=lambda: hour,
            rng=rng_override or rng,
            release_sprite=released.append,
        )
        if owned is not None:
            for i in owned:
                game._grant(i)
            if selected is None:
                selected = owned[0] if owned else -1
            game.player.selected_plant_index = selected
            game.player.last_gift_ms = clock()
            game.state = GameState.PLANT_VIEW
        return game

    return _make


@pytest.fixture
def fixed_offer():
    """Factory: fixed_offer(120) -> RNG whose offers are always 120."""
    return FixedOfferRandom
