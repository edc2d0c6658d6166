# pixelpets_model.py
# ----------------------------------------------------------------------------
# PixelPets - entity catalog and player/economy model
# ----------------------------------------------------------------------------
# Plants and backgrounds are plain data. The Player owns the collection, the
# current selection and the coin balance. Nothing here touches the display;
# sprites arrive through a loader callable so the same code runs headless.
# ----------------------------------------------------------------------------

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, List, Optional, Tuple

# ------------------------------ Constants -----------------------------------

PLANT_COUNT        = 8
PLANT_SPRITE_PATH  = "assets/plant_{n}.png"
FALLBACK_SIZE      = (32, 32)     # used when a sprite is missing

# (sprite handle or None, (w, h) or None)
SpriteLoader = Callable[[str], Tuple[Optional[Any], Optional[Tuple[int, int]]]]

# ------------------------------ Enums ---------------------------------------

class WeatherType(Enum):
    SUNNY  = "Sunny"
    RAINY  = "Rainy"
    CLOUDY = "Cloudy"
    WINDY  = "Windy"

class DayNight(Enum):
    DAY   = "Day"
    NIGHT = "Night"

class Gender(Enum):
    MALE   = "male"
    FEMALE = "female"

WEATHERS = list(WeatherType)

# ------------------------------ Data Models ---------------------------------

@dataclass
class Plant:
    name: str
    sprite_path: str
    sprite: Optional[Any] = None
    width: int = FALLBACK_SIZE[0]
    height: int = FALLBACK_SIZE[1]
    preferred_weather: WeatherType = WeatherType.SUNNY
    is_owned: bool = False

    @property
    def dimensions(self) -> Tuple[int, int]:
        return (self.width, self.height)

@dataclass
class Background:
    name: str
    path: str
    sprite: Optional[Any] = None
    width: int = 0
    height: int = 0

@dataclass
class Player:
    """Collection, selection and wallet. Indices point into the catalog."""
    name: str = ""
    gender: Gender = Gender.MALE
    selected_plant_index: int = -1
    owned_plant_indices: List[int] = field(default_factory=list)
    coins: int = 0
    last_gift_ms: int = 0

    def owns(self, index: int) -> bool:
        return index in self.owned_plant_indices

    def select_plant(self, index: int, catalog_size: int) -> bool:
        if not 0 <= index < catalog_size:
            return False
        self.selected_plant_index = index
        return True

    def add_owned(self, index: int):
        if index not in self.owned_plant_indices:
            self.owned_plant_indices.append(index)

    def remove_owned(self, index: int, catalog_size: int, owned_only: bool = True):
        """
        Drop `index` after the catalog entry at that position was removed.
        Owned indices above it shift down by one, matching the compacted
        catalog. The selection follows the same plant when it sat above the
        removed slot; if it was the removed plant it moves to the last
        viewable plant, or -1 when nothing is left.
        """
        self.owned_plant_indices = [
            i - 1 if i > index else i
            for i in self.owned_plant_indices if i != index
        ]
        sel = self.selected_plant_index
        if sel == index:
            pool = self.owned_plant_indices if owned_only else list(range(catalog_size))
            self.selected_plant_index = pool[-1] if pool else -1
        elif sel > index:
            self.selected_plant_index = sel - 1

    def credit(self, amount: int):
        if amount <= 0:
            raise ValueError(f"credit amount must be positive, got {amount}")
        self.coins += amount

# ------------------------------ Catalog -------------------------------------

def load_catalog(load_sprite: SpriteLoader, rng, count: int = PLANT_COUNT) -> List[Plant]:
    """Build the plant list. A missing sprite still yields a usable 32x32 plant."""
    plants: List[Plant] = []
    for n in range(1, count + 1):
        path = PLANT_SPRITE_PATH.format(n=n)
        sprite, size = load_sprite(path)
        if sprite is None:
            logging.warning(f"Failed to load plant sprite: {path}, using placeholder")
        w, h = size if size else FALLBACK_SIZE
        plants.append(Plant(
            name=f"Plant {n}",
            sprite_path=path,
            sprite=sprite,
            width=w, height=h,
            preferred_weather=rng.choice(WEATHERS),
        ))
    logging.info(f"Loaded {len(plants)} plants")
    return plants
