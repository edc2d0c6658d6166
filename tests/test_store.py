"""
Store negotiation: offers, sales, catalog compaction and the timed result.
"""
import pytest

from pixelpets_game import (
    NOTHING_TO_SELL_TEXT, OFFER_MAX, OFFER_MIN, RESULT_DISPLAY_TIME, WELCOME_TEXT,
    GameState, StaleSelectionError, StorePhase,
)


def open_store(game):
    game.set_state(GameState.STORE_VIEW)
    return game.store


def make_offer(game, index, amount):
    """Put the store into SHOWING_OFFER for a known plant and price."""
    store = open_store(game)
    store.phase = StorePhase.SHOWING_OFFER
    store.selected_plant_index = index
    store.offer_amount = amount
    return store


class TestOffers:
    """Asking to sell."""

    def test_fresh_store_greets(self, make_game):
        game = make_game(owned=[0])
        store = open_store(game)
        assert store.phase is StorePhase.IDLE
        assert store.dialogue_text == WELCOME_TEXT
        assert store.selected_plant_index == -1

    def test_nothing_to_sell(self, make_game):
        game = make_game(owned=[])
        store = open_store(game)
        game.tap(game.layout.yes.center)
        assert store.phase is StorePhase.IDLE
        assert store.dialogue_text == NOTHING_TO_SELL_TEXT
        assert game.player.coins == 0

    def test_offer_picks_owned_plant_in_range(self, make_game):
        game = make_game(owned=[1, 4, 6])
        for _ in range(50):
            store = open_store(game)
            game.tap(game.layout.yes.center)
            assert store.phase is StorePhase.SHOWING_OFFER
            assert store.selected_plant_index in (1, 4, 6)
            assert OFFER_MIN <= store.offer_amount <= OFFER_MAX

    @pytest.mark.parametrize("amount, opening", [
        (200, "Wow, that"),
        (151, "Wow, that"),
        (150, "Hmm, that"),
        (101, "Hmm, that"),
        (100, "Well, that"),
        (50, "Well, that"),
    ])
    def test_dialogue_tiers(self, make_game, fixed_offer, amount, opening):
        game = make_game(owned=[3], rng_override=fixed_offer(amount))
        store = open_store(game)
        game.ask_to_sell()
        assert store.offer_amount == amount
        assert store.dialogue_text.startswith(opening)
        assert "Plant 4" in store.dialogue_text

    def test_no_in_idle_leaves(self, make_game):
        game = make_game(owned=[0])
        open_store(game)
        game.tap(game.layout.no.center)
        assert game.state is GameState.MAP_VIEW
        assert game.store is None


class TestSale:
    """Accepting an offer removes the plant and compacts indices."""

    def test_sell_middle_plant(self, make_game, clock, released):
        game = make_game(count=5, owned=[0, 2, 4], selected=0)
        store = make_offer(game, 2, 120)
        game.tap(game.layout.yes.center)

        assert game.player.coins == 120
        assert len(game.plants) == 4
        assert [p.name for p in game.plants] == ["Plant 1", "Plant 2", "Plant 4", "Plant 5"]
        assert released == ["sprite-3"]
        assert store.phase is StorePhase.SHOWING_RESULT
        assert store.selected_plant_index == -1
        assert store.dialogue_text == "Great! Plant 3 will have a good home. Come back soon!"

        clock.advance(RESULT_DISPLAY_TIME - 1)
        game.update()
        assert game.state is GameState.STORE_VIEW
        clock.advance(1)
        game.update()
        assert game.state is GameState.MAP_VIEW
        assert game.store is None

    def test_owned_indices_follow_their_plants(self, make_game):
        game = make_game(count=5, owned=[0, 2, 4], selected=4)
        make_offer(game, 2, 80)
        game.accept_offer()
        assert game.player.owned_plant_indices == [0, 3]
        assert game.player.selected_plant_index == 3
        assert game.selected_plant.name == "Plant 5"
        for i in game.player.owned_plant_indices:
            assert game.plants[i].is_owned

    def test_sold_plant_is_no_longer_owned(self, make_game):
        game = make_game(count=5, owned=[1, 3], selected=1)
        plant = game.plants[3]
        make_offer(game, 3, 60)
        game.accept_offer()
        assert not plant.is_owned
        assert plant.sprite is None
        assert plant not in game.plants
        assert game.player.owned_plant_indices == [1]

    def test_selling_selected_plant_moves_to_last_owned(self, make_game):
        game = make_game(count=5, owned=[0, 2, 4], selected=2)
        make_offer(game, 2, 75)
        game.accept_offer()
        assert game.player.selected_plant_index == 3
        assert game.selected_plant.name == "Plant 5"

    def test_selling_last_owned_clears_selection(self, make_game):
        game = make_game(count=5, owned=[2])
        make_offer(game, 2, 75)
        game.accept_offer()
        assert game.player.owned_plant_indices == []
        assert game.player.selected_plant_index == -1

    def test_quick_mode_reselects_last_plant(self, make_game):
        game = make_game(count=5, guided=False, owned=[1], selected=1)
        make_offer(game, 1, 90)
        game.accept_offer()
        assert game.player.selected_plant_index == 3

    def test_coins_accumulate(self, make_game):
        game = make_game(count=5, owned=[0, 1])
        make_offer(game, 0, 60)
        game.accept_offer()
        make_offer(game, 0, 70)
        game.accept_offer()
        assert game.player.coins == 130
        assert len(game.plants) == 3


class TestRejection:
    """Declining an offer leaves the catalog alone."""

    def test_reject_keeps_everything(self, make_game, clock, released):
        game = make_game(count=5, owned=[0, 2], selected=0)
        store = make_offer(game, 2, 140)
        game.tap(game.layout.no.center)

        assert store.dialogue_text == "No deal on the Plant 3? Maybe next time!"
        assert store.phase is StorePhase.SHOWING_RESULT
        assert game.player.coins == 0
        assert len(game.plants) == 5
        assert game.player.owned_plant_indices == [0, 2]
        assert released == []

        clock.advance(RESULT_DISPLAY_TIME)
        game.update()
        assert game.state is GameState.MAP_VIEW

    def test_taps_ignored_while_showing_result(self, make_game):
        game = make_game(count=5, owned=[0, 2])
        store = make_offer(game, 2, 140)
        game.reject_offer()
        game.tap(game.layout.yes.center)
        game.tap(game.layout.no.center)
        assert store.phase is StorePhase.SHOWING_RESULT
        assert game.state is GameState.STORE_VIEW
        assert game.player.coins == 0


class TestStaleSelection:
    """A cached index outside the catalog is refused."""

    def test_accept_with_stale_index(self, make_game):
        game = make_game(count=3, owned=[0])
        make_offer(game, 7, 100)
        with pytest.raises(StaleSelectionError):
            game.accept_offer()
        assert game.player.coins == 0
        assert len(game.plants) == 3

    def test_reject_with_stale_index(self, make_game):
        game = make_game(count=3, owned=[0])
        make_offer(game, -1, 100)
        with pytest.raises(IndexError):
            game.reject_offer()

    def test_reset_recovers(self, make_game):
        game = make_game(count=3, owned=[0])
        make_offer(game, 7, 100)
        with pytest.raises(StaleSelectionError):
            game.tap(game.layout.yes.center)
        game.reset_store()
        assert game.store.phase is StorePhase.IDLE
        assert game.store.selected_plant_index == -1


class TestStoreNavigation:
    """Back button and per-visit state."""

    @pytest.mark.parametrize("phase", [StorePhase.IDLE, StorePhase.SHOWING_OFFER,
                                       StorePhase.SHOWING_RESULT])
    def test_back_in_any_phase(self, make_game, phase):
        game = make_game(count=5, owned=[0, 2])
        store = make_offer(game, 2, 120)
        store.phase = phase
        game.tap(game.layout.back.center)
        assert game.state is GameState.MAP_VIEW
        assert game.store is None
        assert game.player.coins == 0
        assert len(game.plants) == 5

    def test_store_resets_on_reentry(self, make_game):
        game = make_game(count=5, owned=[0, 2])
        make_offer(game, 2, 120)
        game.leave_store()
        store = open_store(game)
        assert store.phase is StorePhase.IDLE
        assert store.dialogue_text == WELCOME_TEXT
        assert store.offer_amount == 0
