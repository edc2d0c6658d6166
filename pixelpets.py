# pixelpets.py
# ----------------------------------------------------------------------------
# PixelPets - Plants (pocket-screen pixel pet, pygame front end)
# ----------------------------------------------------------------------------
# A tiny virtual plant pet for a 135x240 display. Name yourself, pick a
# starter, watch your plant under shifting weather, browse the greenhouse,
# visit the map, and sell plants to the shopkeeper for coins. Every ten
# seconds a new plant may arrive as a gift, with a little confetti burst.
#
# Controls:
#   - Mouse Click / Tap : everything (buttons, grid cells, map locations)
#   - Typing            : name entry
#   - Backspace         : delete last character
#   - Enter             : confirm name
#
# Requirements:
#   pip install pygame
#
# Running:
#   python pixelpets.py        (or the `pixelpets` console script)
#
# Notes:
# - Art is optional. Sprites are read from ./assets; anything missing is
#   replaced by a generated placeholder so the game always starts.
# - All state lives in memory and resets on restart.
# ----------------------------------------------------------------------------

import sys
import random
import logging
from typing import Optional, Tuple

try:
    import pygame as pg
except ImportError:
    print("PixelPets requires Pygame. Install with: pip install pygame")
    sys.exit(1)

from pixelpets_model import Background, DayNight, Gender, WeatherType, load_catalog
from pixelpets_game import (
    LOCATION_NAMES, SCREEN_H, SCREEN_W, TOOLBAR_H,
    GameState, PixelPetsGame, StaleSelectionError, StorePhase,
)

# --------------------------- Display constants ------------------------------

SCALE  = 3                    # 3x scale for desktop windows (405x720)
WIN_W  = SCREEN_W * SCALE
WIN_H  = SCREEN_H * SCALE
FPS    = 60                   # ~16 ms per frame

GUIDED = True                 # name entry + starter pick; False = quick start

FONT_PATH  = "assets/fonts/pixel.ttf"
FONT_SIZES = (8, 10, 12, 14, 16)

BACKGROUND_FILES = {
    WeatherType.SUNNY:  "assets/bg_day_sunny.png",
    WeatherType.RAINY:  "assets/bg_day_rainy.png",
    WeatherType.CLOUDY: "assets/bg_day_cloudy.png",
    WeatherType.WINDY:  "assets/bg_day_windy.png",
    DayNight.NIGHT:     "assets/bg_night.png",
}

# ------------------------------ Colors --------------------------------------

def C(r,g,b,a=255): return pg.Color(r,g,b,a)
# GameBoy-ish greens
BG       = C(15, 56, 15)
DARKEST  = C(48, 98, 48)
MEDIUM   = C(139, 172, 15)
LIGHTEST = C(155, 188, 15)

BLACK  = C(0,0,0)
WHITE  = C(255,255,255)
YELL   = C(255,255,0)
RED    = C(255,0,0)
BLUE   = C(0,0,255)
GRAY   = C(100,100,100)
BROWN  = C(139,69,19)
FOREST = C(34,139,34)

SKY_COLORS = {
    WeatherType.SUNNY:  C(135,206,235),
    WeatherType.RAINY:  C(105,105,105),
    WeatherType.CLOUDY: C(176,196,222),
    WeatherType.WINDY:  C(176,224,230),
}
NIGHT_SKY = C(25,25,112)
RAIN      = C(173,216,230,150)

LOCATION_COLORS = {
    GameState.HOUSE_VIEW:      BROWN,
    GameState.GREENHOUSE_VIEW: FOREST,
    GameState.PASTURE_VIEW:    C(144,238,144),
}

# ------------------------------ Utility -------------------------------------

def wrap_text(text, font, w):
    lines = []
    words = text.split(' ')
    cur = ""
    for w0 in words:
        probe = (cur + " " + w0).strip()
        if font.size(probe)[0] <= w:
            cur = probe
        else:
            if cur:
                lines.append(cur)
            cur = w0
    if cur:
        lines.append(cur)
    return lines

def blit_scaled(surf: pg.Surface, sprite: pg.Surface, box: pg.Rect, fill: float = 1.0):
    """Fit `sprite` inside `box` keeping its aspect ratio, centered."""
    w, h = sprite.get_size()
    if w <= 0 or h <= 0:
        return
    scale = min(box.w / w, box.h / h) * fill
    size = (max(1, int(w * scale)), max(1, int(h * scale)))
    img = pg.transform.scale(sprite, size)
    surf.blit(img, img.get_rect(center=box.center))

def make_placeholder(color: pg.Color, label: str, w: int, h: int,
                     font: Optional[pg.font.Font] = None) -> pg.Surface:
    surf = pg.Surface((w, h), pg.SRCALPHA)
    surf.fill(color)
    pg.draw.rect(surf, BLACK, surf.get_rect(), 1)
    if label and font:
        tx = font.render(label, True, BLACK)
        surf.blit(tx, tx.get_rect(center=(w//2, h//2)))
    return surf

def load_sprite(path: str):
    """Asset loader handed to the catalog: (surface, size) or (None, None)."""
    try:
        img = pg.image.load(path)
    except (pg.error, FileNotFoundError) as e:
        logging.warning(f"Unable to load image {path}: {e}")
        return None, None
    if pg.display.get_surface() is not None:
        img = img.convert_alpha()
    return img, img.get_size()

def load_font() -> pg.font.Font:
    for size in FONT_SIZES:
        try:
            font = pg.font.Font(FONT_PATH, size)
        except (pg.error, FileNotFoundError, OSError):
            continue
        logging.info(f"Loaded font at size {size}")
        return font
    logging.warning(f"Font {FONT_PATH} not found, using default font")
    return pg.font.Font(None, 14)

# ------------------------------ Engine --------------------------------------

class PetApp:
    def __init__(self):
        pg.init()
        pg.font.init()
        self.screen = pg.display.set_mode((WIN_W, WIN_H))
        pg.display.set_caption("PixelPets - Plants")
        self.clock = pg.time.Clock()

        # Native-resolution canvas, scaled up each frame
        self.canvas = pg.Surface((SCREEN_W, SCREEN_H)).convert()

        # Fonts
        self.font = load_font()

        # Game state
        self.running = True
        plants = load_catalog(load_sprite, random.Random())
        for p in plants:
            if p.sprite is None:
                p.sprite = make_placeholder(GRAY, "?", p.width, p.height, self.font)
        self.backgrounds = self.load_backgrounds()
        self.game = PixelPetsGame(plants, guided=GUIDED, release_sprite=self.release_sprite)

        self.scenes = {
            GameState.INTRO:                 IntroScene(self),
            GameState.NAME_ENTRY:            NameEntryScene(self),
            GameState.GENDER_SELECTION:      GenderScene(self),
            GameState.STARTER_SELECTION:     StarterScene(self),
            GameState.PLANT_VIEW:            PlantViewScene(self),
            GameState.INVENTORY_VIEW:        InventoryScene(self),
            GameState.MAP_VIEW:              MapScene(self),
            GameState.HOUSE_VIEW:            LocationScene(self),
            GameState.GREENHOUSE_VIEW:       LocationScene(self),
            GameState.PASTURE_VIEW:          LocationScene(self),
            GameState.STORE_VIEW:            StoreScene(self),
            GameState.CELEBRATION_ANIMATION: CelebrationScene(self),
            GameState.GIFT_NOTIFICATION:     GiftScene(self),
        }
        pg.key.start_text_input()

    def load_backgrounds(self) -> dict:
        bgs = {}
        for key, path in BACKGROUND_FILES.items():
            sprite, size = load_sprite(path)
            w, h = size if size else (SCREEN_W, SCREEN_H - TOOLBAR_H)
            bgs[key] = Background(name=key.value, path=path, sprite=sprite, width=w, height=h)
        return bgs

    def release_sprite(self, sprite):
        logging.debug(f"Released sprite {sprite!r}")

    # --------------------------- Main Loop -----------------------------------

    def run(self):
        while self.running:
            self.clock.tick(FPS)
            for e in pg.event.get():
                if e.type == pg.QUIT:
                    self.running = False
                else:
                    self.handle_event(e)

            self.game.update()
            self.scenes[self.game.state].draw(self.canvas)

            # Compose to window
            self.screen.blit(pg.transform.scale(self.canvas, (WIN_W, WIN_H)), (0, 0))
            pg.display.flip()

    def handle_event(self, e):
        game = self.game
        if e.type == pg.MOUSEBUTTONDOWN and e.button == 1:
            try:
                game.tap(self.screen_pos(e.pos))
            except StaleSelectionError as exc:
                logging.error(f"Store selection went stale: {exc}")
                game.reset_store()
        elif e.type == pg.TEXTINPUT:
            game.type_text(e.text)
        elif e.type == pg.KEYDOWN:
            if e.key == pg.K_BACKSPACE:
                game.backspace()
            elif e.key in (pg.K_RETURN, pg.K_KP_ENTER):
                game.confirm()

    # --------------------------- Helpers -------------------------------------

    def screen_pos(self, pos: Tuple[int,int]) -> Tuple[int,int]:
        """Window pixels to logical 135x240 coordinates."""
        return (pos[0]//SCALE, pos[1]//SCALE)

    def text(self, surf, msg, pos, color=WHITE, center=False, font=None):
        tx = (font or self.font).render(msg, True, color)
        if center:
            surf.blit(tx, tx.get_rect(midtop=(pos[0], pos[1])))
        else:
            surf.blit(tx, pos)
        return tx.get_height()

    def button(self, surf, rect: pg.Rect, label: str = "", selected=False, enabled=True):
        col = MEDIUM if enabled else DARKEST
        pg.draw.rect(surf, col, rect)
        pg.draw.rect(surf, DARKEST if not selected else YELL, rect, 1)
        if label:
            tx = self.font.render(label, True, BLACK if enabled else GRAY)
            surf.blit(tx, tx.get_rect(center=rect.center))

    def toolbar(self, surf):
        bar = pg.Rect(0, SCREEN_H - TOOLBAR_H, SCREEN_W, TOOLBAR_H)
        pg.draw.rect(surf, DARKEST, bar)
        pg.draw.rect(surf, LIGHTEST, bar, 1)

# ------------------------------ Scenes --------------------------------------

class Scene:
    def __init__(self, app: PetApp):
        self.app = app

    @property
    def game(self) -> PixelPetsGame:
        return self.app.game

    def draw(self, surf: pg.Surface): pass

# -------------------------------- Intro -------------------------------------

class IntroScene(Scene):
    def draw(self, surf):
        surf.fill(BG)
        pg.draw.rect(surf, DARKEST, pg.Rect(10, 40, SCREEN_W-20, 60))
        self.app.text(surf, "PIXELPETS", (SCREEN_W//2, 50), center=True)
        self.app.text(surf, "PLANTS", (SCREEN_W//2, 70), center=True)

        # Pixel plant in a pot
        cx, cy = SCREEN_W//2, SCREEN_H//2
        pg.draw.rect(surf, BROWN, pg.Rect(cx-15, cy+10, 30, 20))
        pg.draw.rect(surf, C(0,100,0), pg.Rect(cx-2, cy-30, 4, 40))
        for i in range(3):
            pg.draw.rect(surf, C(0,150,0), pg.Rect(cx + (i-1)*10 - 5, cy - 30 + i*10, 10, 5))

        self.app.text(surf, "TAP TO START", (SCREEN_W//2, SCREEN_H-40), center=True)

# ------------------------ Character Creation --------------------------------

class NameEntryScene(Scene):
    def draw(self, surf):
        surf.fill(BG)
        lay = self.game.layout
        self.app.text(surf, "What's your name?", (SCREEN_W//2, 50), center=True)

        pg.draw.rect(surf, WHITE, lay.name_field)
        pg.draw.rect(surf, DARKEST, lay.name_field, 1)
        cursor = "_" if (pg.time.get_ticks() // 500) % 2 == 0 else ""
        self.app.text(surf, self.game.player.name + cursor,
                      (lay.name_field.x + 4, lay.name_field.y + 4), BLACK)

        ready = bool(self.game.player.name.strip())
        self.app.button(surf, lay.continue_btn, "OK", enabled=ready)

class GenderScene(Scene):
    def draw(self, surf):
        surf.fill(BG)
        lay = self.game.layout
        gender = self.game.player.gender
        self.app.text(surf, f"Hi {self.game.player.name}!", (SCREEN_W//2, 40), center=True)
        self.app.text(surf, "Boy or girl?", (SCREEN_W//2, 58), center=True)

        for rect, g in ((lay.male, Gender.MALE), (lay.female, Gender.FEMALE)):
            pg.draw.rect(surf, MEDIUM if gender is g else DARKEST, rect)
            pg.draw.rect(surf, BLACK, rect, 1)
            cx, cy = rect.center
            r = rect.w // 4
            if g is Gender.MALE:
                pg.draw.circle(surf, BLUE, (cx, cy+2), r, 2)
                pg.draw.line(surf, BLUE, (cx+r-2, cy-r+4), (cx+r+4, cy-r-2), 2)
                pg.draw.line(surf, BLUE, (cx+r+4, cy-r-2), (cx+r, cy-r-2), 2)
                pg.draw.line(surf, BLUE, (cx+r+4, cy-r-2), (cx+r+4, cy-r+2), 2)
            else:
                pg.draw.circle(surf, RED, (cx, cy-3), r, 2)
                pg.draw.line(surf, RED, (cx, cy-3+r), (cx, cy+r+5), 2)
                pg.draw.line(surf, RED, (cx-r//2, cy+r+2), (cx+r//2, cy+r+2), 2)

        self.app.button(surf, lay.continue_btn, "Next")

class StarterScene(Scene):
    def draw(self, surf):
        surf.fill(BG)
        lay = self.game.layout
        self.app.text(surf, "Pick a starter", (SCREEN_W//2, 40), center=True)

        for rect, index in zip(lay.starters, self.game.starter_choices):
            plant = self.game.plants[index]
            picked = index == self.game.starter_pick
            pg.draw.rect(surf, MEDIUM if picked else DARKEST, rect)
            pg.draw.rect(surf, BLACK, rect, 1)
            if plant.sprite is not None:
                blit_scaled(surf, plant.sprite, rect.inflate(-10, -10))
            if picked:
                pg.draw.rect(surf, YELL, rect.inflate(-4, -4), 1)
                self.app.text(surf, plant.name, (SCREEN_W//2, rect.bottom + 8), center=True)

        self.app.button(surf, lay.continue_btn, "Grow!", enabled=self.game.starter_pick >= 0)

# ------------------------------ Plant View ----------------------------------

class PlantViewScene(Scene):
    def draw(self, surf):
        game = self.game
        lay = game.layout
        sky = game.sky
        plant = game.selected_plant
        area = pg.Rect(0, 0, SCREEN_W, SCREEN_H - TOOLBAR_H)

        surf.fill(BG)
        night = sky.day_night is DayNight.NIGHT
        pg.draw.rect(surf, NIGHT_SKY if night else SKY_COLORS[sky.weather], area)
        bg = self.app.backgrounds.get(DayNight.NIGHT if night else sky.weather)
        if bg is not None and bg.sprite is not None:
            scale = SCREEN_W / bg.width
            img = pg.transform.scale(bg.sprite, (SCREEN_W, int(bg.height * scale)))
            surf.blit(img, (0, max(0, (area.h - img.get_height()) // 2)))

        if sky.weather is WeatherType.RAINY:
            for drop in sky.raindrops:
                pg.draw.line(surf, RAIN, (drop.x, drop.y), (drop.x, drop.y + drop.length))

        if plant is not None:
            box = pg.Rect(0, 0, int(SCREEN_W*0.5), int(area.h*0.5))
            box.center = area.center
            if plant.sprite is not None:
                blit_scaled(surf, plant.sprite, box)
            self.app.text(surf, plant.name, (SCREEN_W//2, 10), center=True)
            mood = "<3" if game.plant_is_happy(plant) else ""
            self.app.text(surf, f"Likes {plant.preferred_weather.value} {mood}",
                          (SCREEN_W//2, box.bottom + 6), center=True)

        coins = f"{game.player.coins}c"
        self.app.text(surf, coins, (SCREEN_W - self.app.font.size(coins)[0] - 4, 10), YELL)

        # Weather button: a little sun and cloud
        self.app.button(surf, lay.weather)
        cx, cy = lay.weather.center
        pg.draw.circle(surf, YELL, (cx-4, cy), lay.weather.w//4)
        pg.draw.circle(surf, WHITE, (cx+3, cy-2), 3)
        pg.draw.circle(surf, WHITE, (cx+7, cy-2), 3)

        self.app.toolbar(surf)
        for rect, label in ((lay.prev_plant, "<"), (lay.next_plant, ">"),
                            (lay.menu, "="), (lay.map, "M"), (lay.store, "$")):
            self.app.button(surf, rect, label)

# ------------------------------ Inventory -----------------------------------

class InventoryScene(Scene):
    def draw(self, surf):
        game = self.game
        lay = game.layout
        surf.fill(FOREST)

        for index, rect in lay.grid_cells(game.page, len(game.plants)):
            plant = game.plants[index]
            owned = game.player.owns(index) or not game.guided
            selected = index == game.player.selected_plant_index
            pg.draw.rect(surf, MEDIUM if owned else DARKEST, rect)
            pg.draw.rect(surf, YELL if selected else BLACK, rect, 1)
            if owned and plant.sprite is not None:
                blit_scaled(surf, plant.sprite, rect, 0.85)
            elif not owned:
                self.app.text(surf, "?", (rect.centerx, rect.centery - 6), LIGHTEST, center=True)

        self.app.toolbar(surf)
        self.app.button(surf, lay.back, "<-")
        self.app.button(surf, lay.prev_page, "<", enabled=game.page > 0)
        self.app.button(surf, lay.next_page, ">", enabled=game.page < game.last_page())
        self.app.text(surf, f"{game.page + 1}/{game.last_page() + 1}",
                      (SCREEN_W//2 - 10, SCREEN_H - TOOLBAR_H + 10))

# ------------------------------ Map -----------------------------------------

class MapScene(Scene):
    def draw(self, surf):
        lay = self.game.layout
        surf.fill(BG)
        pg.draw.rect(surf, C(90,170,90), pg.Rect(0, 0, SCREEN_W, SCREEN_H - TOOLBAR_H))
        # Paths between the four corners
        mid = (SCREEN_W//2, (SCREEN_H - TOOLBAR_H)//2)
        for rect in lay.locations:
            pg.draw.line(surf, C(237,201,175), rect.center, mid, 4)

        for rect, name in zip(lay.locations, LOCATION_NAMES):
            self.app.button(surf, rect, name[0])
            self.app.text(surf, name, (rect.centerx, rect.bottom + 2), WHITE, center=True)

        self.app.toolbar(surf)
        self.app.button(surf, lay.back, "<-")

class LocationScene(Scene):
    def draw(self, surf):
        state = self.game.state
        surf.fill(LOCATION_COLORS.get(state, BG))
        name = state.name.replace("_VIEW", "").title()
        self.app.text(surf, name, (SCREEN_W//2, 10), center=True)
        self.app.toolbar(surf)
        self.app.button(surf, self.game.layout.back, "<-")

# ------------------------------ Store ---------------------------------------

class StoreScene(Scene):
    def draw(self, surf):
        game = self.game
        lay = game.layout
        store = game.store
        surf.fill(C(120,80,40))
        pg.draw.rect(surf, BROWN, pg.Rect(0, 30, SCREEN_W, 20))      # counter
        pg.draw.circle(surf, C(240,200,160), (SCREEN_W//2, 20), 10)  # shopkeeper

        self.app.toolbar(surf)
        self.app.button(surf, lay.back, "<-")
        if store is None:
            return

        pg.draw.rect(surf, WHITE, lay.dialog)
        pg.draw.rect(surf, DARKEST, lay.dialog, 1)
        y = lay.dialog.y + 4
        for ln in wrap_text(store.dialogue_text, self.app.font, lay.dialog.w - 12):
            y += self.app.text(surf, ln, (lay.dialog.x + 6, y), BLACK) + 1

        index = store.selected_plant_index
        if store.phase is StorePhase.SHOWING_OFFER and 0 <= index < len(game.plants):
            plant = game.plants[index]
            self.app.text(surf, f"Offer: {store.offer_amount}c", (lay.dialog.x + 6, lay.dialog.bottom - 16), BLACK)
            if plant.sprite is not None:
                preview = pg.Rect(lay.dialog.right - 34, lay.dialog.bottom - 34, 30, 30)
                blit_scaled(surf, plant.sprite, preview)

        if store.phase in (StorePhase.IDLE, StorePhase.SHOWING_OFFER):
            self.app.button(surf, lay.yes, "Yes")
            self.app.button(surf, lay.no, "No")

# ------------------------------ Gifts ---------------------------------------

class CelebrationScene(Scene):
    def draw(self, surf):
        surf.fill(BG)
        self.app.text(surf, "Something's coming!", (SCREEN_W//2, 30), YELL, center=True)
        celebration = self.game.celebration
        if celebration is None:
            return
        for p in celebration.particles:
            dot = pg.Surface((p.size, p.size), pg.SRCALPHA)
            dot.fill((*p.color, max(0, min(255, int(255 * p.fade)))))
            surf.blit(dot, (int(p.x), int(p.y)))

class GiftScene(Scene):
    def draw(self, surf):
        game = self.game
        lay = game.layout
        surf.fill(BG)
        pg.draw.rect(surf, MEDIUM, lay.notice)
        pg.draw.rect(surf, DARKEST, lay.notice, 1)
        self.app.text(surf, "New Plant!", (SCREEN_W//2, lay.notice.y + 6), BLACK, center=True)

        index = game.gifted_index
        if 0 <= index < len(game.plants):
            plant = game.plants[index]
            y = lay.notice.y + 22
            for ln in wrap_text(f"You received {plant.name}!", self.app.font, lay.notice.w - 12):
                y += self.app.text(surf, ln, (SCREEN_W//2, y), BLACK, center=True)
            if plant.sprite is not None:
                blit_scaled(surf, plant.sprite, pg.Rect(lay.notice.centerx - 16, y + 2, 32, 32))

        self.app.button(surf, lay.ok, "OK")

# ------------------------------ Entry Point ----------------------------------

def main():
    logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(levelname)s - %(message)s')
    try:
        app = PetApp()
    except pg.error as e:
        logging.error(f"Initialization failed: {e}")
        sys.exit(1)
    app.run()
    pg.quit()

if __name__ == "__main__":
    main()
