# filename: huffman_errors.py


class HuffmanError(Exception):
    """Base class for every error raised by the Huffman coder."""


class EmptyInputError(HuffmanError, ValueError):
    """A tree was requested for a frequency table with no symbols."""


class MalformedPayloadError(HuffmanError, ValueError):
    """An encoded payload cannot be turned back into its original text."""
