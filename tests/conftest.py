"""Shared fixtures: a scenario hand, solver nodes, and in-memory collaborators."""

import pytest

from solvermatch.features.board_texture import extract_board_texture, flop_archetype
from solvermatch.features.encoder import FeatureVectorEncoder
from solvermatch.game.cards import Card
from solvermatch.game.hand import Hand
from solvermatch.search.index import InMemoryVectorIndex
from solvermatch.search.metadata import NodeMetadata
from solvermatch.shared.config import AnalysisConfig
from solvermatch.snapshots.assembler import PositionPair, SnapshotInput
from solvermatch.storage.codec import ZstdNodeCodec
from solvermatch.storage.node import ActionStat, ComboStrategy, SeatStrategy, SolverNode
from solvermatch.storage.object_store import InMemoryObjectStore

RIVER_BOARD = ("Kd", "7s", "2c", "9h", "4d")
RIVER_HISTORY = ("Check", "Bet 4.00", "Call", "Check", "Check", "Bet 12.00")


def scenario_payload():
    """
    Four-handed, 50/100 blinds, 100bb deep. Hero is the BB.

    Preflop: CO folds, BTN opens to 375, SB folds, BB calls (pot 8bb).
    Flop: BB checks, BTN bets 4bb, BB calls (pot 16bb).
    Turn: check, check.
    River: BTN bets 12bb, BB folds.
    """
    return {
        "header": {"sb": 50, "bb": 100, "ante": 0, "gametype": "cash"},
        "playerChips": [
            {"chips": 10000, "pos": "SB"},
            {"chips": 10000, "pos": "BB", "hero": True},
            {"chips": 10000, "pos": "CO"},
            {"chips": 10000, "pos": "BTN"},
        ],
        "board": {"card1": "Kd", "card2": "7s", "card3": "2c", "card4": "9h", "card5": "4d"},
        "preflopSummary": {"cards": {"card1": "Qh", "card2": "Jh"}},
        "info": {"potType": "srp"},
        "actionScript": [
            {"street": "preflop", "playerIndex": 2, "action": {"type": "fold"}},
            {"street": "preflop", "playerIndex": 3, "action": {"type": "raise", "amount": 375}},
            {"street": "preflop", "playerIndex": 0, "action": {"type": "fold"}},
            {"street": "preflop", "playerIndex": 1, "action": {"type": "call", "amount": 275}},
            {"street": "flop", "isNewStreet": True},
            {"street": "flop", "playerIndex": 1, "action": {"type": "check"}},
            {"street": "flop", "playerIndex": 3, "action": {"type": "bet", "amount": 400}},
            {"street": "flop", "playerIndex": 1, "action": {"type": "call", "amount": 400}},
            {"street": "turn", "isNewStreet": True},
            {"street": "turn", "playerIndex": 1, "action": {"type": "check"}},
            {"street": "turn", "playerIndex": 3, "action": {"type": "check"}},
            {"street": "river", "isNewStreet": True},
            {"street": "river", "playerIndex": 3, "action": {"type": "bet", "amount": 1200}},
            {"street": "river", "playerIndex": 1, "action": {"type": "fold"}},
        ],
    }


@pytest.fixture
def hand_payload():
    return scenario_payload()


@pytest.fixture
def scenario_hand():
    return Hand.parse(scenario_payload())


@pytest.fixture
def river_snapshot():
    return SnapshotInput(
        street="RIVER",
        board=RIVER_BOARD,
        pot_bb=28.0,
        stack_bb=92.25,
        positions=PositionPair(ip="btn", oop="bb"),
        action_history=RIVER_HISTORY,
        action_pot_fractions=(0.0, 0.5, 0.0, 0.0, 0.0, 0.75),
        game_type="cash",
        pot_type="srp",
        next_to_act="oop",
        hero_cards="QhJh",
    )


def _combo(a, b, freqs, evs, weight=1.0):
    return ComboStrategy(
        cards=(Card.new(a).index, Card.new(b).index),
        weight=weight,
        frequencies=tuple(freqs),
        evs=tuple(evs),
    )


def make_river_node(node_id="river_1", history=RIVER_HISTORY, pot=16.0):
    labels = ("Fold", "Call", "Raise 36.00")
    return SolverNode(
        node_id=node_id,
        street="RIVER",
        next_to_act="oop",
        positions_oop="bb",
        positions_ip="btn",
        game_type="cash",
        pot_type="srp",
        pot=pot,
        stack_oop=92.25,
        stack_ip=92.25,
        board=RIVER_BOARD,
        action_history=tuple(history),
        oop_range="KQs,QJs,JTs,99,77:0.5,A9s",
        ip_range="KK,AK,KQ,T8s,65s,A5s",
        oop=SeatStrategy(
            actions=(
                ActionStat(labels[0], 0.55, 0.0),
                ActionStat(labels[1], 0.40, 1.25),
                ActionStat(labels[2], 0.05, -0.5),
            ),
            combos=(
                _combo("Qh", "Jh", (0.9, 0.1, 0.0), (0.0, -2.5, -9.0)),
                _combo("Kh", "Qh", (0.0, 0.8, 0.2), (0.0, 6.0, 5.5)),
                _combo("9s", "9c", (0.0, 0.25, 0.75), (0.0, 20.0, 24.0)),
            ),
        ),
        ip=SeatStrategy(),
        children=("river_1_f", "river_1_c"),
    )


@pytest.fixture
def river_node():
    return make_river_node()


@pytest.fixture
def codec():
    return ZstdNodeCodec()


@pytest.fixture
def object_store():
    return InMemoryObjectStore()


def river_metadata(offset=None, length=None, node_identifier=None, **overrides):
    fields = dict(
        _id="meta-river-1",
        s3_bucket="solves",
        s3_key="river/shard_000.bin",
        offset=offset,
        length=length,
        node_identifier=node_identifier,
        street="RIVER",
        game_type="cash",
        pot_type="srp",
        positions_ip="btn",
        positions_oop="bb",
        position_bucket_ip="LP",
        position_bucket_oop="BLINDS",
        board_tex=extract_board_texture(RIVER_BOARD),
        flop_archetype=flop_archetype(RIVER_BOARD),
        action_sequence="X-B-C-X-X-B",
        stack_bb=92.25,
        pot_bb=28.0,
    )
    fields.update(overrides)
    return NodeMetadata(**fields)


@pytest.fixture
def stored_river(object_store, codec, river_node):
    """River node packed into the in-memory store; returns its metadata."""
    offset, length = object_store.append("solves", "river/shard_000.bin", codec.pack([river_node]))
    return river_metadata(offset=offset, length=length)


@pytest.fixture
def river_index(river_snapshot, stored_river):
    """Index holding one exact river match for ``river_snapshot``."""
    index = InMemoryVectorIndex()
    index.add("river_nodes", FeatureVectorEncoder().encode(river_snapshot), stored_river)
    return index


@pytest.fixture
def fast_analysis():
    return AnalysisConfig(equity_samples=200, exact_enumeration_limit=20_000)
