# filename: huffman_service.py

import logging
from dataclasses import dataclass

from huffman_core import HuffmanLogic, Leaf, build, count, dump_tree, leaves, load_tree
from huffman_errors import MalformedPayloadError

logger = logging.getLogger(__name__)

DEFAULT_SEPARATOR = ";"
BASELINE_BITS_PER_SYMBOL = 8


@dataclass(frozen=True)
class CompressionStats:
    symbols: int
    distinct_symbols: int
    encoded_bits: int

    @property
    def bits_per_symbol(self) -> float:
        if not self.symbols:
            return 0.0
        return self.encoded_bits / self.symbols

    @property
    def ratio(self) -> float:
        """Encoded size relative to a fixed-width baseline (lower is better)."""
        if not self.symbols:
            return 0.0
        return self.encoded_bits / (self.symbols * BASELINE_BITS_PER_SYMBOL)


class HuffmanService:
    def __init__(self, separator=DEFAULT_SEPARATOR):
        if len(separator) != 1 or separator in "01":
            raise ValueError(f"separator must be one character other than 0 or 1, got {separator!r}")
        self.separator = separator
        self.logic = HuffmanLogic()

    def encode(self, text: str) -> str:
        """Return ``"<tree-json><separator><bits>"`` for ``text``; empty text encodes to ``""``."""
        if not text:
            return ""
        tree = self.logic.build_tree(text)
        codes = self.logic.generate_codes(tree)

        bits = "".join(codes[char] for char in text)
        logger.debug("encoded %d chars (%d distinct) into %d bits", len(text), len(codes), len(bits))
        return dump_tree(tree) + self.separator + bits

    def decode(self, payload: str) -> str:
        if not payload:
            return ""
        description, separator, bits = payload.rpartition(self.separator)
        if not separator:
            self._malformed(f"payload has no {self.separator!r} separator")
        root = load_tree(description)
        if not all(isinstance(symbol, str) for symbol in leaves(root)):
            self._malformed("tree leaves must be strings")

        decoded = []
        node = root
        for position, bit in enumerate(bits):
            if bit not in ("0", "1"):
                self._malformed(f"invalid bit {bit!r} at position {position}")
            if isinstance(root, Leaf):
                if bit != "0":
                    self._malformed(f"no code for bit 1 at position {position}")
                decoded.append(root.symbol)
                continue
            node = node.child(bit)
            if node is None:
                self._malformed(f"bit sequence ending at position {position} matches no code")
            if isinstance(node, Leaf):
                decoded.append(node.symbol)
                node = root
        if node is not root:
            self._malformed("bit string ends in the middle of a code")

        logger.debug("decoded %d bits into %d chars", len(bits), len(decoded))
        return "".join(decoded)

    def stats(self, text: str) -> CompressionStats:
        if not text:
            return CompressionStats(symbols=0, distinct_symbols=0, encoded_bits=0)
        frequencies = count(text)
        codes = self.logic.generate_codes(build(frequencies))
        encoded_bits = sum(len(codes[symbol]) * weight for symbol, weight in frequencies.items())
        return CompressionStats(symbols=len(text), distinct_symbols=len(frequencies), encoded_bits=encoded_bits)

    def _malformed(self, message):
        logger.warning("cannot decode payload: %s", message)
        raise MalformedPayloadError(message)


_default_service = HuffmanService()


def encode(text: str) -> str:
    return _default_service.encode(text)


def decode(payload: str) -> str:
    return _default_service.decode(payload)
