"""
Binary node codec.

A stored blob is a Zstandard frame (numcodecs ``Zstd``) around a little-endian
payload::

    header   b"SNOD" | u16 version | u16 node count
    node     str node_id, street, next_to_act, positions_oop, positions_ip,
             game_type, pot_type
             f32 pot, stack_oop, stack_ip
             u8 n + u8[n] board card indices
             u8 n + str[n] action history
             lstr oop_range, lstr ip_range
             seat x2 (oop, ip):
                 u8 n + str[n] action labels
                 f32[n] frequencies, f32[n] evs
                 u16 m + m combos of (u8 card, u8 card, f32 weight, f32[n] freq, f32[n] ev)
             u8 n + str[n] child node ids

``str`` is a u16 length plus UTF-8 bytes, ``lstr`` a u32 length plus UTF-8.
"""

from __future__ import annotations

import struct
from typing import List, Protocol, Sequence

import numcodecs
import numpy as np

from solvermatch.game.cards import Card
from solvermatch.shared.errors import DecodeError
from solvermatch.storage.node import ActionStat, ComboStrategy, SeatStrategy, SolverNode

MAGIC = b"SNOD"
VERSION = 1
_HEADER = struct.Struct("<4sHH")


class NodeCodec(Protocol):
    """Turns stored bytes into solver nodes."""

    def decompress(self, data: bytes) -> bytes:
        """Undo the storage compression."""

    def decode(self, payload: bytes) -> List[SolverNode]:
        """Parse a decompressed payload."""


def _combo_dtype(num_actions: int) -> np.dtype:
    fields = [("c1", "u1"), ("c2", "u1"), ("weight", "<f4")]
    if num_actions:
        fields += [("freq", "<f4", (num_actions,)), ("ev", "<f4", (num_actions,))]
    return np.dtype(fields)


class _Reader:
    """Bounds-checked cursor over a payload."""

    def __init__(self, payload: bytes):
        self.buf = memoryview(payload)
        self.pos = 0

    def take(self, size: int) -> memoryview:
        if size < 0 or self.pos + size > len(self.buf):
            raise DecodeError(
                f"Truncated payload: need {size} bytes at offset {self.pos}, "
                f"have {len(self.buf) - self.pos}"
            )
        chunk = self.buf[self.pos : self.pos + size]
        self.pos += size
        return chunk

    def unpack(self, fmt: str) -> tuple:
        s = struct.Struct(fmt)
        return s.unpack(self.take(s.size))

    def u8(self) -> int:
        return self.unpack("<B")[0]

    def u16(self) -> int:
        return self.unpack("<H")[0]

    def f32(self) -> float:
        return float(self.unpack("<f")[0])

    def text(self, wide: bool = False) -> str:
        size = self.unpack("<I")[0] if wide else self.u16()
        try:
            return bytes(self.take(size)).decode("utf-8")
        except UnicodeDecodeError as exc:
            raise DecodeError(f"Invalid UTF-8 string at offset {self.pos - size}") from exc

    def floats(self, count: int) -> tuple[float, ...]:
        if count == 0:
            return ()
        raw = np.frombuffer(self.take(4 * count), dtype="<f4")
        return tuple(float(x) for x in raw)

    def remaining(self) -> int:
        return len(self.buf) - self.pos


class _Writer:
    def __init__(self):
        self.parts: list[bytes] = []

    def pack(self, fmt: str, *values) -> None:
        self.parts.append(struct.pack(fmt, *values))

    def text(self, value: str, wide: bool = False) -> None:
        data = value.encode("utf-8")
        self.pack("<I" if wide else "<H", len(data))
        self.parts.append(data)

    def floats(self, values: Sequence[float]) -> None:
        self.parts.append(np.asarray(values, dtype="<f4").tobytes())

    def getvalue(self) -> bytes:
        return b"".join(self.parts)


class ZstdNodeCodec:
    """
    Default :class:`NodeCodec`: Zstandard compression plus the binary layout above.

    ``encode``/``compress`` exist for corpus tooling and tests; the matching
    path only decompresses and decodes.
    """

    def __init__(self, level: int = 3):
        self._zstd = numcodecs.Zstd(level=level)

    # ------------------------------------------------------------------
    # Compression
    # ------------------------------------------------------------------

    def compress(self, payload: bytes) -> bytes:
        return bytes(self._zstd.encode(payload))

    def decompress(self, data: bytes) -> bytes:
        if not data:
            raise DecodeError("Empty blob")
        try:
            return bytes(self._zstd.decode(data))
        except (RuntimeError, ValueError, TypeError) as exc:
            raise DecodeError(f"Zstd decompression failed: {exc}") from exc

    # ------------------------------------------------------------------
    # Payload
    # ------------------------------------------------------------------

    def decode(self, payload: bytes) -> List[SolverNode]:
        reader = _Reader(payload)
        magic, version, count = _HEADER.unpack(reader.take(_HEADER.size))
        if magic != MAGIC:
            raise DecodeError(f"Bad magic {bytes(magic)!r}")
        if version != VERSION:
            raise DecodeError(f"Unsupported node format version {version}")

        nodes = [self._decode_node(reader) for _ in range(count)]
        if reader.remaining():
            raise DecodeError(f"{reader.remaining()} trailing bytes after {count} nodes")
        return nodes

    def _decode_node(self, r: _Reader) -> SolverNode:
        node_id, street, next_to_act, pos_oop, pos_ip, game_type, pot_type = (
            r.text() for _ in range(7)
        )
        if next_to_act not in ("ip", "oop"):
            raise DecodeError(f"Node {node_id}: invalid next_to_act {next_to_act!r}")
        pot, stack_oop, stack_ip = r.unpack("<fff")
        board = tuple(self._card(r.u8(), node_id) for _ in range(r.u8()))
        history = tuple(r.text() for _ in range(r.u8()))
        oop_range = r.text(wide=True)
        ip_range = r.text(wide=True)
        oop = self._decode_seat(r, node_id)
        ip = self._decode_seat(r, node_id)
        children = tuple(r.text() for _ in range(r.u8()))

        return SolverNode(
            node_id=node_id,
            street=street,
            next_to_act=next_to_act,  # type: ignore[arg-type]
            positions_oop=pos_oop,
            positions_ip=pos_ip,
            game_type=game_type,
            pot_type=pot_type,
            pot=float(pot),
            stack_oop=float(stack_oop),
            stack_ip=float(stack_ip),
            board=board,
            action_history=history,
            oop_range=oop_range,
            ip_range=ip_range,
            oop=oop,
            ip=ip,
            children=children,
        )

    def _decode_seat(self, r: _Reader, node_id: str) -> SeatStrategy:
        n = r.u8()
        labels = [r.text() for _ in range(n)]
        freqs = r.floats(n)
        evs = r.floats(n)
        actions = tuple(ActionStat(a, f, e) for a, f, e in zip(labels, freqs, evs))

        m = r.u16()
        dtype = _combo_dtype(n)
        combos = []
        table = np.frombuffer(r.take(dtype.itemsize * m), dtype=dtype, count=m) if m else ()
        for row in table:
            c1, c2 = int(row["c1"]), int(row["c2"])
            if c1 >= 52 or c2 >= 52 or c1 == c2:
                raise DecodeError(f"Node {node_id}: invalid combo cards ({c1}, {c2})")
            combos.append(
                ComboStrategy(
                    cards=(c1, c2),
                    weight=float(row["weight"]),
                    frequencies=tuple(float(x) for x in row["freq"]) if n else (),
                    evs=tuple(float(x) for x in row["ev"]) if n else (),
                )
            )
        return SeatStrategy(actions=actions, combos=tuple(combos))

    @staticmethod
    def _card(index: int, node_id: str) -> str:
        if index >= 52:
            raise DecodeError(f"Node {node_id}: card index {index} out of range")
        return repr(Card.from_index(index))

    def encode(self, nodes: Sequence[SolverNode]) -> bytes:
        w = _Writer()
        w.pack("<4sHH", MAGIC, VERSION, len(nodes))
        for node in nodes:
            for value in (
                node.node_id,
                node.street,
                node.next_to_act,
                node.positions_oop,
                node.positions_ip,
                node.game_type,
                node.pot_type,
            ):
                w.text(value)
            w.pack("<fff", node.pot, node.stack_oop, node.stack_ip)
            w.pack("<B", len(node.board))
            for card in node.board:
                w.pack("<B", Card.new(card).index)
            w.pack("<B", len(node.action_history))
            for token in node.action_history:
                w.text(token)
            w.text(node.oop_range, wide=True)
            w.text(node.ip_range, wide=True)
            for seat in (node.oop, node.ip):
                self._encode_seat(w, seat)
            w.pack("<B", len(node.children))
            for child in node.children:
                w.text(child)
        return w.getvalue()

    @staticmethod
    def _encode_seat(w: _Writer, seat: SeatStrategy) -> None:
        n = len(seat.actions)
        w.pack("<B", n)
        for stat in seat.actions:
            w.text(stat.action)
        w.floats([a.frequency for a in seat.actions])
        w.floats([a.ev for a in seat.actions])

        table = np.zeros(len(seat.combos), dtype=_combo_dtype(n))
        for i, combo in enumerate(seat.combos):
            if len(combo.frequencies) != n or len(combo.evs) != n:
                raise ValueError(f"Combo {combo.hand} does not have {n} action values")
            table["c1"][i], table["c2"][i] = combo.cards
            table["weight"][i] = combo.weight
            if n:
                table["freq"][i] = combo.frequencies
                table["ev"][i] = combo.evs
        w.pack("<H", len(seat.combos))
        w.parts.append(table.tobytes())

    def pack(self, nodes: Sequence[SolverNode]) -> bytes:
        """Encode and compress."""
        return self.compress(self.encode(nodes))

    def unpack(self, data: bytes) -> List[SolverNode]:
        """Decompress and decode."""
        return self.decode(self.decompress(data))
