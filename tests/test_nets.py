"""Tests for the net table and the lazy net resolver."""

from __future__ import annotations

from geda_kicad.connectivity import CopperConnectivity
from geda_kicad.models import (
    Board,
    Footprint,
    FootprintText,
    Layer,
    Line,
    NetlistEntry,
    Pin,
    Point,
    Polygon,
    Via,
)
from geda_kicad.nets import NO_CONNECT, Net, NetResolver, NetTable


class CountingSearch:
    """Connectivity stand-in: fixed clusters, counts every search."""

    def __init__(self, *clusters: set) -> None:
        self.clusters = clusters
        self.calls = 0

    def find_connected(self, seed: object) -> set:
        self.calls += 1
        for cluster in self.clusters:
            if seed in cluster:
                return set(cluster)
        return {seed}


def _board(netlist=()) -> tuple[Board, Pin, Pin, Via, Line]:
    pin1 = Pin("1", -100, 0, 50)
    pin2 = Pin("2", 100, 0, 50)
    fp = Footprint(
        0, 0,
        [FootprintText("R1"), FootprintText("1k"), FootprintText("0603")],
        pins=[pin1, pin2],
    )
    via = Via(500, 500, 60)
    line = Line(Point(0, 0), Point(500, 500), 10)
    board = Board(1000, 1000, footprints=[fp], vias=[via], netlist=list(netlist))
    return board, pin1, pin2, via, line


def _resolver(board: Board, search: CountingSearch) -> NetResolver:
    return NetResolver(board, NetTable.from_board(board), search)


class TestNetTable:

    def test_net_zero_first(self):
        board, *_ = _board([NetlistEntry("GND", ["R1-1"])])
        table = NetTable.from_board(board)
        assert table.nets[0] == NO_CONNECT
        assert table.nets[1] == Net(1, "GND")
        assert len(table) == 2

    def test_leading_spaces_stripped(self):
        board, *_ = _board([NetlistEntry("  VCC", [])])
        assert NetTable.from_board(board).nets[1].name == "VCC"

    def test_first_listing_wins(self):
        board, *_ = _board([
            NetlistEntry("A", ["R1-1"]),
            NetlistEntry("B", ["R1-1"]),
        ])
        assert NetTable.from_board(board).lookup("R1-1") == Net(1, "A")

    def test_unknown_node(self):
        board, *_ = _board()
        assert NetTable.from_board(board).lookup("R9-9") is None


class TestNetResolver:

    def test_unconnected_via_gets_net_zero(self):
        board, _, _, via, _ = _board()
        net = _resolver(board, CountingSearch()).resolve(via)
        assert net.number == 0
        assert net.name == "no connection"

    def test_pin_matched_by_refdes_and_number(self):
        board, pin1, _, _, _ = _board([NetlistEntry("GND", ["R1-1"])])
        assert _resolver(board, CountingSearch()).resolve(pin1) == Net(1, "GND")

    def test_repeat_query_is_cached(self):
        board, pin1, _, _, _ = _board([NetlistEntry("GND", ["R1-1"])])
        search = CountingSearch()
        resolver = _resolver(board, search)
        resolver.resolve(pin1)
        resolver.resolve(pin1)
        assert search.calls == 1
        assert resolver.searches == 1

    def test_one_search_per_cluster(self):
        board, pin1, _, via, line = _board([NetlistEntry("GND", ["R1-1"])])
        search = CountingSearch({pin1, via, line})
        resolver = _resolver(board, search)
        assert resolver.resolve(line) == Net(1, "GND")
        assert resolver.resolve(via) == Net(1, "GND")
        assert resolver.resolve(pin1) == Net(1, "GND")
        assert search.calls == 1

    def test_seed_listing_beats_cluster(self):
        board, pin1, pin2, _, _ = _board([
            NetlistEntry("A", ["R1-1"]),
            NetlistEntry("B", ["R1-2"]),
        ])
        search = CountingSearch({pin1, pin2})
        resolver = _resolver(board, search)
        assert resolver.resolve(pin2) == Net(2, "B")
        # the whole cluster was assigned by the first search
        assert resolver.resolve(pin1) == Net(2, "B")
        assert search.calls == 1

    def test_cluster_takes_lowest_net(self):
        board, pin1, pin2, via, _ = _board([
            NetlistEntry("A", ["R1-2"]),
            NetlistEntry("B", ["R1-1"]),
        ])
        resolver = _resolver(board, CountingSearch({pin1, pin2, via}))
        assert resolver.resolve(via) == Net(1, "A")

    def test_visited(self):
        board, pin1, pin2, via, line = _board()
        resolver = _resolver(board, CountingSearch({via, line}))
        assert not resolver.is_visited(via)
        resolver.resolve(via)
        assert resolver.is_visited(via)
        assert resolver.is_visited(line)
        assert not resolver.is_visited(pin1)

    def test_node_net_ignores_board_primitives(self):
        board, _, _, via, _ = _board([NetlistEntry("A", ["R1-1"])])
        assert _resolver(board, CountingSearch()).node_net(via) is None


class TestResolverOverCopper:
    """Resolution driven by the geometric search instead of a fake."""

    def _pour_board(self, pin1_thermals: list[int]) -> tuple[Board, Pin, Pin, Polygon]:
        mm = 1_000_000
        pin1 = Pin("1", 0, 0, mm, clearance=mm // 2, thermals=pin1_thermals)
        pin2 = Pin("1", 0, 0, mm, clearance=mm // 2)
        pour = Polygon([
            Point(0, 0), Point(20 * mm, 0), Point(20 * mm, 20 * mm), Point(0, 20 * mm),
        ])
        fps = [
            Footprint(5 * mm, 10 * mm, [FootprintText("R1"), FootprintText(""), FootprintText("")], pins=[pin1]),
            Footprint(15 * mm, 10 * mm, [FootprintText("R2"), FootprintText(""), FootprintText("")], pins=[pin2]),
        ]
        board = Board(
            20 * mm, 20 * mm,
            layers=[Layer("top", "copper", "Top", group=0, polygons=[pour])],
            footprints=fps,
            netlist=[NetlistEntry("A", ["R1-1"]), NetlistEntry("B", ["R2-1"])],
        )
        return board, pin1, pin2, pour

    def test_cleared_pins_keep_their_nets(self):
        board, pin1, pin2, pour = self._pour_board([])
        resolver = NetResolver(board, NetTable.from_board(board), CopperConnectivity(board))
        assert resolver.resolve(pin1) == Net(1, "A")
        assert resolver.resolve(pin2) == Net(2, "B")
        assert resolver.resolve(pour) == NO_CONNECT

    def test_thermal_gives_pour_the_pin_net(self):
        board, pin1, pin2, pour = self._pour_board([1])
        resolver = NetResolver(board, NetTable.from_board(board), CopperConnectivity(board))
        assert resolver.resolve(pin1) == Net(1, "A")
        assert resolver.resolve(pour) == Net(1, "A")
        assert resolver.resolve(pin2) == Net(2, "B")
