#!/usr/bin/env python3
"""
Decode a node shard and print what is inside.

Usage:
    python scripts/read_shard.py data/nodes/river/shard_000.zst
    python scripts/read_shard.py shard.bin --offset 4096 --length 812 --node river_17
"""

import argparse
import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from solvermatch.analysis.bet_sizing import format_sizing, parse_action_sizing
from solvermatch.analysis.strategy import format_combo_actions, rows_from_seat
from solvermatch.shared.errors import DecodeError, StorageError
from solvermatch.shared.log_setup import configure_logging
from solvermatch.storage.codec import ZstdNodeCodec
from solvermatch.storage.node import SolverNode
from solvermatch.storage.object_store import LocalObjectStore


def print_node(node: SolverNode, combos: int) -> None:
    print(f"\n=== {node.node_id} ({node.street}) ===")
    print(f"  board:       {' '.join(node.board) or '-'}")
    print(f"  positions:   oop={node.positions_oop} ip={node.positions_ip}")
    print(f"  game/pot:    {node.game_type} / {node.pot_type}")
    print(f"  pot:         {node.pot:.2f}bb  stacks oop={node.stack_oop:.2f} ip={node.stack_ip:.2f}")
    print(f"  history:     {', '.join(node.action_history) or '(root)'}")
    print(f"  next to act: {node.next_to_act}")

    for seat_name in ("oop", "ip"):
        seat = node.strategy_for(seat_name)
        if not seat.actions:
            continue
        print(f"  {seat_name} strategy:")
        for stat in seat.actions:
            parsed = parse_action_sizing(stat.action, node.pot, node.pot)
            print(
                f"    {format_sizing(parsed):<16} {stat.frequency:6.1%}  ev {stat.ev:7.2f}"
            )
        for row in rows_from_seat(seat)[:combos]:
            hand = "".join(repr(c) for c in row.cards)
            print(f"    {hand}  w={row.weight:.2f}  {format_combo_actions(row.actions)}")

    if node.children:
        print(f"  children:    {', '.join(node.children)}")


def main() -> int:
    parser = argparse.ArgumentParser(description="Decode and summarize a solver node shard")
    parser.add_argument("path", type=Path, help="Shard file")
    parser.add_argument("--offset", type=int, default=None, help="Byte offset of the blob")
    parser.add_argument("--length", type=int, default=None, help="Byte length of the blob")
    parser.add_argument("--node", default=None, help="Only print this node id")
    parser.add_argument("--combos", type=int, default=5, help="Combo rows to show per seat")
    parser.add_argument("--log-level", default="WARNING")
    args = parser.parse_args()

    configure_logging(args.log_level)
    path = args.path.resolve()
    store = LocalObjectStore(path.parent.parent)

    try:
        raw = store.get(path.parent.name, path.name, args.offset, args.length)
        nodes = ZstdNodeCodec().unpack(raw)
    except (StorageError, DecodeError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    print(f"{path.name}: {len(raw)} bytes, {len(nodes)} nodes")
    if args.node:
        nodes = [n for n in nodes if n.node_id == args.node]
        if not nodes:
            print(f"Node {args.node!r} not found", file=sys.stderr)
            return 1

    for node in nodes:
        print_node(node, args.combos)
    return 0


if __name__ == "__main__":
    sys.exit(main())
