# pixelpets_game.py
# ----------------------------------------------------------------------------
# PixelPets - game state & progression controller
# ----------------------------------------------------------------------------
# Screen state machine, store negotiation, timed plant gifts with the
# celebration burst, and the ambient sky. The controller owns every piece of
# mutable session state plus the hit-rectangle layout; the pygame front end
# only feeds it taps/text/time and draws what it finds here.
#
# Time is injected: `clock` returns monotonic milliseconds, `hour` returns the
# local wall-clock hour. Randomness goes through a single `random.Random`.
# ----------------------------------------------------------------------------

import math
import random
import logging
from dataclasses import dataclass
from datetime import datetime
from enum import Enum, auto
from typing import Callable, Dict, List, Optional, Tuple

import pygame as pg

from pixelpets_model import (
    WEATHERS, DayNight, Gender, Plant, Player, WeatherType,
)

# --------------------------- Screen constants --------------------------------

SCREEN_W, SCREEN_H = 135, 240
TOOLBAR_H   = 34
BUTTON_SIZE = 24

MENU_COLS    = 3
MENU_ROWS    = 4
MENU_PADDING = 5
PAGE_SIZE    = MENU_COLS * MENU_ROWS

# ------------------------------ Timers (ms) ---------------------------------

GIFT_INTERVAL           = 10000
CELEBRATION_DURATION    = 2000
WEATHER_CHANGE_INTERVAL = 30000
RESULT_DISPLAY_TIME     = 2000

# ------------------------------ Effects -------------------------------------

MAX_PARTICLES = 50
GRAVITY       = 0.05
MAX_RAINDROPS = 100

FESTIVE_COLORS = [
    (255, 0, 0),      # red
    (255, 255, 0),    # yellow
    (0, 255, 0),      # green
    (0, 0, 255),      # blue
    (255, 0, 255),    # purple
]

# ------------------------------ Economy -------------------------------------

OFFER_MIN, OFFER_MAX = 50, 200
MAX_NAME_LEN = 10

WELCOME_TEXT = "Welcome! I'm interested in buying plants. Want to sell?"
NOTHING_TO_SELL_TEXT = "You don't have any plants to sell!"

# ------------------------------ States --------------------------------------

class GameState(Enum):
    INTRO                 = auto()
    NAME_ENTRY            = auto()
    GENDER_SELECTION      = auto()
    STARTER_SELECTION     = auto()
    PLANT_VIEW            = auto()
    INVENTORY_VIEW        = auto()
    MAP_VIEW              = auto()
    HOUSE_VIEW            = auto()
    GREENHOUSE_VIEW       = auto()
    PASTURE_VIEW          = auto()
    STORE_VIEW            = auto()
    CELEBRATION_ANIMATION = auto()
    GIFT_NOTIFICATION     = auto()

LOCATION_VIEWS = (
    GameState.HOUSE_VIEW, GameState.GREENHOUSE_VIEW,
    GameState.PASTURE_VIEW, GameState.STORE_VIEW,
)

# Map quadrants in button order: house, greenhouse, pasture, store
MAP_DESTINATIONS = [
    GameState.PLANT_VIEW,
    GameState.INVENTORY_VIEW,
    GameState.PASTURE_VIEW,
    GameState.STORE_VIEW,
]
LOCATION_NAMES = ["House", "Greenhouse", "Pasture", "Store"]

class StorePhase(Enum):
    IDLE           = auto()
    ASKING         = auto()
    SHOWING_OFFER  = auto()
    SHOWING_RESULT = auto()

class StaleSelectionError(IndexError):
    """The store's cached plant index no longer points into the catalog."""

# ------------------------------ Data Models ---------------------------------

@dataclass
class StoreNegotiation:
    phase: StorePhase = StorePhase.IDLE
    selected_plant_index: int = -1
    offer_amount: int = 0
    dialogue_text: str = WELCOME_TEXT
    result_until_ms: int = 0

@dataclass
class Particle:
    x: float
    y: float
    vx: float
    vy: float
    color: Tuple[int, int, int]
    size: int
    lifespan: int
    age: int = 0

    @classmethod
    def spawn(cls, rng: random.Random, origin: Tuple[float, float]) -> "Particle":
        angle = rng.uniform(0.0, math.tau)
        speed = rng.uniform(0.5, 2.5)
        return cls(
            x=origin[0], y=origin[1],
            vx=math.cos(angle) * speed, vy=math.sin(angle) * speed,
            color=rng.choice(FESTIVE_COLORS),
            size=rng.randint(2, 4),
            lifespan=rng.randint(30, 89),
        )

    @property
    def fade(self) -> float:
        return 1.0 - self.age / self.lifespan

@dataclass
class Celebration:
    particles: List[Particle]
    start_ms: int

    @classmethod
    def burst(cls, rng: random.Random, now: int) -> "Celebration":
        origin = (SCREEN_W / 2.0, SCREEN_H / 2.0)
        return cls([Particle.spawn(rng, origin) for _ in range(MAX_PARTICLES)], now)

    def step(self, rng: random.Random):
        origin = (SCREEN_W / 2.0, SCREEN_H / 2.0)
        for i, p in enumerate(self.particles):
            p.x += p.vx
            p.y += p.vy
            p.vy += GRAVITY
            p.age += 1
            if p.age >= p.lifespan:
                self.particles[i] = Particle.spawn(rng, origin)

    def finished(self, now: int) -> bool:
        return now - self.start_ms >= CELEBRATION_DURATION

@dataclass
class Raindrop:
    x: float
    y: float
    speed: float
    length: int

class Sky:
    """Ambient weather drift, day/night and the rain animation."""

    def __init__(self, rng: random.Random, now: int = 0):
        self.weather = WeatherType.SUNNY
        self.day_night = DayNight.DAY
        self.last_change_ms = now
        self.raindrops = [
            Raindrop(
                x=rng.randrange(SCREEN_W), y=rng.randrange(SCREEN_H),
                speed=2.0 + rng.randrange(20) / 10.0,
                length=5 + rng.randrange(10),
            )
            for _ in range(MAX_RAINDROPS)
        ]

    def update(self, now: int, hour: int, rng: random.Random):
        if now - self.last_change_ms >= WEATHER_CHANGE_INTERVAL:
            self.weather = rng.choice(WEATHERS)
            self.last_change_ms = now
            logging.debug(f"Weather changed to {self.weather.value}")

        self.day_night = DayNight.DAY if 6 <= hour < 18 else DayNight.NIGHT

        if self.weather is WeatherType.RAINY:
            for drop in self.raindrops:
                drop.y += drop.speed
                if drop.y > SCREEN_H:
                    drop.y = -drop.length
                    drop.x = rng.randrange(SCREEN_W)

# ------------------------------ Layout --------------------------------------

class Layout:
    """Every hit rectangle the input layer tests against. Renderers read only."""

    def __init__(self):
        bar_y = SCREEN_H - TOOLBAR_H + 5
        step = BUTTON_SIZE + 2
        x0 = (SCREEN_W - (5 * BUTTON_SIZE + 4 * 2)) // 2

        # Plant view toolbar
        self.prev_plant = pg.Rect(x0 + step * 0, bar_y, BUTTON_SIZE, BUTTON_SIZE)
        self.next_plant = pg.Rect(x0 + step * 1, bar_y, BUTTON_SIZE, BUTTON_SIZE)
        self.menu       = pg.Rect(x0 + step * 2, bar_y, BUTTON_SIZE, BUTTON_SIZE)
        self.map        = pg.Rect(x0 + step * 3, bar_y, BUTTON_SIZE, BUTTON_SIZE)
        self.store      = pg.Rect(x0 + step * 4, bar_y, BUTTON_SIZE, BUTTON_SIZE)
        self.weather    = pg.Rect(5, 26, BUTTON_SIZE, BUTTON_SIZE)

        # Shared toolbar back button, inventory paging
        self.back      = pg.Rect(5, bar_y, BUTTON_SIZE, BUTTON_SIZE)
        self.prev_page = pg.Rect(SCREEN_W - 2 * BUTTON_SIZE - 10, bar_y, BUTTON_SIZE, BUTTON_SIZE)
        self.next_page = pg.Rect(SCREEN_W - BUTTON_SIZE - 5, bar_y, BUTTON_SIZE, BUTTON_SIZE)

        # Map: one button per quadrant, kept clear of the toolbar
        size, pad = 40, 10
        low_y = SCREEN_H - TOOLBAR_H - size - pad
        self.locations = [
            pg.Rect(pad, pad, size, size),
            pg.Rect(SCREEN_W - size - pad, pad, size, size),
            pg.Rect(pad, low_y, size, size),
            pg.Rect(SCREEN_W - size - pad, low_y, size, size),
        ]

        # Character creation
        self.name_field   = pg.Rect(10, 80, SCREEN_W - 20, 20)
        self.continue_btn = pg.Rect((SCREEN_W - 64) // 2, 160, 64, 20)
        self.male         = pg.Rect(20, 90, 40, 40)
        self.female       = pg.Rect(SCREEN_W - 60, 90, 40, 40)
        self.starters     = [pg.Rect(2 + i * 45, 80, 40, 40) for i in range(3)]

        # Store dialogue
        self.dialog = pg.Rect(10, SCREEN_H - TOOLBAR_H - 130, SCREEN_W - 20, 100)
        yes_x = (SCREEN_W - (40 * 2 + 20)) // 2
        self.yes = pg.Rect(yes_x, self.dialog.bottom + 4, 40, 20)
        self.no  = pg.Rect(yes_x + 60, self.dialog.bottom + 4, 40, 20)

        # Gift notification
        self.notice = pg.Rect(10, 70, SCREEN_W - 20, 100)
        self.ok     = pg.Rect((SCREEN_W - 40) // 2, self.notice.bottom - 28, 40, 20)

    def grid_cells(self, page: int, catalog_size: int) -> List[Tuple[int, pg.Rect]]:
        """(catalog index, rect) for each populated cell on `page`."""
        cell = (SCREEN_W - (MENU_COLS + 1) * MENU_PADDING) // MENU_COLS
        cells = []
        for slot in range(PAGE_SIZE):
            index = page * PAGE_SIZE + slot
            if index >= catalog_size:
                break
            row, col = divmod(slot, MENU_COLS)
            x = MENU_PADDING + col * (cell + MENU_PADDING)
            y = MENU_PADDING + row * (cell + MENU_PADDING)
            cells.append((index, pg.Rect(x, y, cell, cell)))
        return cells

# ------------------------------ Controller ----------------------------------

class PixelPetsGame:
    def __init__(self, plants: List[Plant], guided: bool = True,
                 clock: Optional[Callable[[], int]] = None,
                 hour: Optional[Callable[[], int]] = None,
                 rng: Optional[random.Random] = None,
                 release_sprite: Optional[Callable[[object], None]] = None):
        self.plants = plants
        self.guided = guided
        self.clock = clock or pg.time.get_ticks
        self.hour = hour or (lambda: datetime.now().hour)
        self.rng = rng or random.Random()
        self.release_sprite = release_sprite or (lambda sprite: None)

        self.state = GameState.INTRO
        self.player = Player()
        self.layout = Layout()
        self.sky = Sky(self.rng, self.clock())

        # Per-state data; None outside the owning state
        self.store: Optional[StoreNegotiation] = None
        self.celebration: Optional[Celebration] = None

        self.page = 0
        self.starter_choices: List[int] = []
        self.starter_pick = -1
        self.gifted_index = -1

        self._tap_handlers: Dict[GameState, Callable[[Tuple[int, int]], None]] = {
            GameState.INTRO:                 self._tap_intro,
            GameState.NAME_ENTRY:            self._tap_name_entry,
            GameState.GENDER_SELECTION:      self._tap_gender,
            GameState.STARTER_SELECTION:     self._tap_starter,
            GameState.PLANT_VIEW:            self._tap_plant_view,
            GameState.INVENTORY_VIEW:        self._tap_inventory,
            GameState.MAP_VIEW:              self._tap_map,
            GameState.HOUSE_VIEW:            self._tap_location,
            GameState.GREENHOUSE_VIEW:       self._tap_location,
            GameState.PASTURE_VIEW:          self._tap_location,
            GameState.STORE_VIEW:            self._tap_store,
            GameState.CELEBRATION_ANIMATION: self._tap_celebration,
            GameState.GIFT_NOTIFICATION:     self._tap_gift_notice,
        }

    # --------------------------- Queries -------------------------------------

    @property
    def selected_plant(self) -> Optional[Plant]:
        i = self.player.selected_plant_index
        return self.plants[i] if 0 <= i < len(self.plants) else None

    def viewable_indices(self) -> List[int]:
        if self.guided:
            return sorted(i for i in self.player.owned_plant_indices if i < len(self.plants))
        return list(range(len(self.plants)))

    def last_page(self) -> int:
        return max(0, math.ceil(len(self.plants) / PAGE_SIZE) - 1)

    def plant_is_happy(self, plant: Plant) -> bool:
        return plant.preferred_weather is self.sky.weather

    # --------------------------- Transitions ---------------------------------

    def set_state(self, new: GameState):
        old = self.state
        if old is GameState.STORE_VIEW and new is not GameState.STORE_VIEW:
            self.store = None
        if new is GameState.STORE_VIEW:
            self.reset_store()
        elif new is GameState.STARTER_SELECTION:
            count = min(3, len(self.plants))
            self.starter_choices = self.rng.sample(range(len(self.plants)), count)
            self.starter_pick = -1
        elif new is GameState.INVENTORY_VIEW:
            self.page = min(self.page, self.last_page())
        self.state = new
        logging.info(f"State: {old.name} -> {new.name}")

    def _grant(self, index: int):
        self.player.add_owned(index)
        self.plants[index].is_owned = True

    def _enter_garden(self, index: int):
        """First plant of the session; starts the gift timer."""
        self._grant(index)
        self.player.select_plant(index, len(self.plants))
        self.player.last_gift_ms = self.clock()
        self.set_state(GameState.PLANT_VIEW)

    # --------------------------- Input ---------------------------------------

    def tap(self, pos: Tuple[int, int]):
        self._tap_handlers[self.state](pos)

    def type_text(self, text: str):
        if self.state is not GameState.NAME_ENTRY:
            return
        for ch in text:
            if ch.isprintable() and len(self.player.name) < MAX_NAME_LEN:
                self.player.name += ch

    def backspace(self):
        if self.state is GameState.NAME_ENTRY:
            self.player.name = self.player.name[:-1]

    def confirm(self):
        if self.state is GameState.NAME_ENTRY and self.player.name.strip():
            self.player.name = self.player.name.strip()
            self.set_state(GameState.GENDER_SELECTION)

    def _tap_intro(self, pos):
        if self.guided:
            self.set_state(GameState.NAME_ENTRY)
        elif self.plants:
            self._enter_garden(0)
        else:
            self.set_state(GameState.PLANT_VIEW)

    def _tap_name_entry(self, pos):
        if self.layout.continue_btn.collidepoint(pos):
            self.confirm()

    def _tap_gender(self, pos):
        if self.layout.male.collidepoint(pos):
            self.player.gender = Gender.MALE
        elif self.layout.female.collidepoint(pos):
            self.player.gender = Gender.FEMALE
        elif self.layout.continue_btn.collidepoint(pos):
            self.set_state(GameState.STARTER_SELECTION)

    def _tap_starter(self, pos):
        for slot, index in zip(self.layout.starters, self.starter_choices):
            if slot.collidepoint(pos):
                self.starter_pick = index
                return
        if self.layout.continue_btn.collidepoint(pos) and self.starter_pick >= 0:
            self._enter_garden(self.starter_pick)

    def _tap_plant_view(self, pos):
        lay = self.layout
        if lay.prev_plant.collidepoint(pos):
            self.step_plant(-1)
        elif lay.next_plant.collidepoint(pos):
            self.step_plant(1)
        elif lay.weather.collidepoint(pos):
            self.cycle_weather()
        elif lay.menu.collidepoint(pos):
            self.set_state(GameState.INVENTORY_VIEW)
        elif lay.map.collidepoint(pos):
            self.set_state(GameState.MAP_VIEW)
        elif lay.store.collidepoint(pos):
            self.set_state(GameState.STORE_VIEW)

    def step_plant(self, delta: int):
        pool = self.viewable_indices()
        if not pool:
            return
        sel = self.player.selected_plant_index
        pos = pool.index(sel) if sel in pool else 0
        self.player.selected_plant_index = pool[(pos + delta + len(pool)) % len(pool)]

    def cycle_weather(self):
        plant = self.selected_plant
        if plant is not None:
            plant.preferred_weather = self.rng.choice(WEATHERS)

    def _tap_inventory(self, pos):
        lay = self.layout
        for index, rect in lay.grid_cells(self.page, len(self.plants)):
            if rect.collidepoint(pos):
                if self.guided and not self.player.owns(index):
                    return
                self.player.select_plant(index, len(self.plants))
                self.set_state(GameState.PLANT_VIEW)
                return
        if lay.back.collidepoint(pos):
            self.set_state(GameState.MAP_VIEW)
        elif lay.prev_page.collidepoint(pos):
            self.turn_page(-1)
        elif lay.next_page.collidepoint(pos):
            self.turn_page(1)

    def turn_page(self, delta: int):
        self.page = max(0, min(self.last_page(), self.page + delta))
        logging.debug(f"Inventory page {self.page}")

    def _tap_map(self, pos):
        for rect, dest in zip(self.layout.locations, MAP_DESTINATIONS):
            if rect.collidepoint(pos):
                self.set_state(dest)
                return
        if self.layout.back.collidepoint(pos):
            self.set_state(GameState.PLANT_VIEW)

    def _tap_location(self, pos):
        if self.layout.back.collidepoint(pos):
            self.set_state(GameState.MAP_VIEW)

    def _tap_celebration(self, pos):
        self._end_celebration()

    def _tap_gift_notice(self, pos):
        if self.layout.ok.collidepoint(pos):
            self.player.select_plant(self.gifted_index, len(self.plants))
            self.gifted_index = -1
            self.set_state(GameState.PLANT_VIEW)

    # --------------------------- Store ---------------------------------------

    def _tap_store(self, pos):
        lay = self.layout
        if lay.back.collidepoint(pos):
            self.leave_store()
            return
        phase = self.store.phase
        if phase is StorePhase.IDLE:
            if lay.yes.collidepoint(pos):
                self.ask_to_sell()
            elif lay.no.collidepoint(pos):
                self.leave_store()
        elif phase is StorePhase.SHOWING_OFFER:
            if lay.yes.collidepoint(pos):
                self.accept_offer()
            elif lay.no.collidepoint(pos):
                self.reject_offer()

    def reset_store(self):
        self.store = StoreNegotiation()

    def leave_store(self):
        self.set_state(GameState.MAP_VIEW)

    def ask_to_sell(self):
        store = self.store
        store.phase = StorePhase.ASKING
        owned = self.player.owned_plant_indices
        if not owned:
            store.dialogue_text = NOTHING_TO_SELL_TEXT
            store.phase = StorePhase.IDLE
            return
        store.selected_plant_index = self.rng.choice(owned)
        store.offer_amount = self.rng.randint(OFFER_MIN, OFFER_MAX)
        name = self.plants[store.selected_plant_index].name
        if store.offer_amount > 150:
            store.dialogue_text = f"Wow, that {name} looks amazing! I'll give you a great price!"
        elif store.offer_amount > 100:
            store.dialogue_text = f"Hmm, that {name} is in good shape. I can offer a fair price."
        else:
            store.dialogue_text = f"Well, that {name} has seen better days... here's what I can offer."
        store.phase = StorePhase.SHOWING_OFFER
        logging.info(f"Store offers {store.offer_amount} coins for {name}")

    def _offered_plant(self) -> Plant:
        index = self.store.selected_plant_index
        if not 0 <= index < len(self.plants):
            raise StaleSelectionError(
                f"store selection {index} outside catalog of {len(self.plants)}")
        return self.plants[index]

    def accept_offer(self):
        store = self.store
        plant = self._offered_plant()
        index = store.selected_plant_index

        self.player.credit(store.offer_amount)
        self.release_sprite(plant.sprite)
        plant.sprite = None
        plant.is_owned = False
        del self.plants[index]

        self.player.remove_owned(index, len(self.plants), owned_only=self.guided)
        if self.gifted_index == index:
            self.gifted_index = -1
        elif self.gifted_index > index:
            self.gifted_index -= 1
        store.selected_plant_index = -1

        store.dialogue_text = f"Great! {plant.name} will have a good home. Come back soon!"
        self._show_result()
        logging.info(f"Sold {plant.name} for {store.offer_amount} coins "
                     f"(balance {self.player.coins})")

    def reject_offer(self):
        plant = self._offered_plant()
        self.store.dialogue_text = f"No deal on the {plant.name}? Maybe next time!"
        self._show_result()

    def _show_result(self):
        self.store.phase = StorePhase.SHOWING_RESULT
        self.store.result_until_ms = self.clock() + RESULT_DISPLAY_TIME

    # --------------------------- Gifts ---------------------------------------

    def gift_due(self, now: int) -> bool:
        return (self.state is GameState.PLANT_VIEW
                and len(self.player.owned_plant_indices) < len(self.plants)
                and now - self.player.last_gift_ms >= GIFT_INTERVAL)

    def request_gift(self, now: Optional[int] = None) -> bool:
        now = self.clock() if now is None else now
        candidates = [i for i in range(len(self.plants)) if not self.player.owns(i)]
        if not candidates:
            return False
        index = self.rng.choice(candidates)
        self._grant(index)
        self.player.last_gift_ms = now
        self.gifted_index = index
        self.celebration = Celebration.burst(self.rng, now)
        self.set_state(GameState.CELEBRATION_ANIMATION)
        logging.info(f"Gifted {self.plants[index].name}")
        return True

    def _end_celebration(self):
        self.celebration = None
        self.set_state(GameState.GIFT_NOTIFICATION)

    # --------------------------- Frame update --------------------------------

    def validate_selection(self):
        n = len(self.plants)
        sel = self.player.selected_plant_index
        if n == 0 or sel < 0:
            sel = -1
        elif sel >= n:
            sel = n - 1
        self.player.selected_plant_index = sel
        if self.state is GameState.PLANT_VIEW and sel < 0:
            self.set_state(GameState.INVENTORY_VIEW)

    def update(self):
        now = self.clock()
        self.sky.update(now, self.hour(), self.rng)
        self.validate_selection()

        if self.gift_due(now):
            self.request_gift(now)

        if self.state is GameState.CELEBRATION_ANIMATION:
            self.celebration.step(self.rng)
            if self.celebration.finished(now):
                self._end_celebration()
        elif (self.state is GameState.STORE_VIEW
              and self.store.phase is StorePhase.SHOWING_RESULT
              and now >= self.store.result_until_ms):
            self.leave_store()
