"""Net table and lazy, cluster-wide net resolution."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from .connectivity import ConnectivitySearch
from .models import Board, Footprint, Pad, Pin

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Net:
    number: int
    name: str


NO_CONNECT = Net(0, "no connection")


class NetTable:
    """Net 0 followed by one net per netlist entry, in netlist order."""

    def __init__(self, nets: list[Net], nodes: dict[str, Net]) -> None:
        self.nets = nets
        self._nodes = nodes

    @classmethod
    def from_board(cls, board: Board) -> NetTable:
        nets = [NO_CONNECT]
        nodes: dict[str, Net] = {}
        for number, entry in enumerate(board.netlist, start=1):
            net = Net(number, entry.name.lstrip(" "))
            nets.append(net)
            for node in entry.connections:
                # a node listed twice stays with its first net
                nodes.setdefault(node, net)
        return cls(nets, nodes)

    def lookup(self, node: str) -> Net | None:
        """Net for a "<refdes>-<pin number>" node name, if listed."""
        return self._nodes.get(node)

    def __len__(self) -> int:
        return len(self.nets)


class NetResolver:
    """Assigns each primitive exactly one net per export run.

    The first query for an unvisited primitive runs one connectivity search
    and records the same net for every reachable primitive not yet assigned,
    so the rest of that cluster is answered from the cache.
    """

    def __init__(self, board: Board, table: NetTable, search: ConnectivitySearch) -> None:
        self.table = table
        self._search = search
        self._assigned: dict[object, Net] = {}
        self._owners: dict[object, Footprint] = {}
        for fp in board.footprints:
            for pin in fp.pins:
                self._owners[pin] = fp
            for pad in fp.pads:
                self._owners[pad] = fp
        self.searches = 0

    def is_visited(self, primitive: object) -> bool:
        return primitive in self._assigned

    def node_net(self, primitive: object) -> Net | None:
        """Net named in the netlist for a pin or pad, None for anything else."""
        owner = self._owners.get(primitive)
        if owner is None or not isinstance(primitive, (Pin, Pad)):
            return None
        return self.table.lookup(f"{owner.refdes}-{primitive.number}")

    def resolve(self, primitive: object) -> Net:
        net = self._assigned.get(primitive)
        if net is not None:
            return net

        self.searches += 1
        reached = self._search.find_connected(primitive)
        net = self.node_net(primitive)
        if net is None:
            net = self._cluster_net(reached)
        if net is None:
            logger.debug("No netlist match for %r, using net 0", primitive)
            net = NO_CONNECT

        self._assigned[primitive] = net
        for other in reached:
            self._assigned.setdefault(other, net)
        return net

    def _cluster_net(self, reached: set[object]) -> Net | None:
        # lowest net number keeps the choice independent of set ordering
        candidates = [
            net for net in (self.node_net(p) for p in reached) if net is not None
        ]
        if not candidates:
            return None
        return min(candidates, key=lambda n: n.number)
