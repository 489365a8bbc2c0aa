import os
import sys
import random
import logging
import pytest

# Add the repository root to path
REPO_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))
if REPO_ROOT not in sys.path:
	sys.path.insert(0, REPO_ROOT)

import huffman_service as hs
from huffman_core import HuffmanLogic, invert, load_tree
from huffman_errors import MalformedPayloadError


def _get_service(**kwargs):
	return hs.HuffmanService(**kwargs)


def test_encode_string():
	encoded = hs.encode('foo')
	assert encoded.split(';')[1] == '011'
	assert encoded == '[2,["f"],["o"]];011'


def test_encode_uses_tree_codes():
	svc = _get_service()
	tree_json, bits = svc.encode('aaabbc').split(';')
	assert invert(load_tree(tree_json)) == {'a': '0', 'c': '10', 'b': '11'}
	assert bits == '000111110'


def test_roundtrip_fixed_strings():
	svc = _get_service()
	for text in ('foo', 'a', 'ab', 'hello world', 'semi;colons;;inside', '0101 bits 1010', 'naïve café ☃', '"quoted" [brackets] {braces}'):
		assert svc.decode(svc.encode(text)) == text


def test_roundtrip_random_text():
	rng = random.Random(1234)
	alphabet = 'abcdefghij ;"[]\\01'
	for n in (1, 2, 3, 17, 500):
		text = ''.join(rng.choice(alphabet) for _ in range(n))
		assert hs.decode(hs.encode(text)) == text


def test_empty_input():
	svc = _get_service()
	assert svc.encode('') == ''
	assert svc.decode('') == ''


def test_single_symbol_repeated():
	svc = _get_service()
	encoded = svc.encode('A' * 10)
	assert encoded == '[["A"]];' + '0' * 10
	assert svc.decode(encoded) == 'A' * 10


def test_single_symbol_rejects_one_bit():
	with pytest.raises(MalformedPayloadError):
		hs.decode('[["A"]];001')


def test_custom_separator():
	svc = _get_service(separator='|')
	encoded = svc.encode('foo')
	assert encoded == '[2,["f"],["o"]]|011'
	assert svc.decode(encoded) == 'foo'


@pytest.mark.parametrize('separator', ['', '0', '1', '::'])
def test_invalid_separator(separator):
	with pytest.raises(ValueError):
		_get_service(separator=separator)


def test_truncated_stream_behavior():
	svc = _get_service()
	encoded = svc.encode('aaabbc')
	with pytest.raises(MalformedPayloadError):
		svc.decode(encoded[:-1])


def test_corrupted_header_behavior():
	svc = _get_service()
	encoded = svc.encode('Hello World' * 50)
	with pytest.raises(MalformedPayloadError):
		svc.decode('x' + encoded[1:])


@pytest.mark.parametrize('payload', ['[2,["f"],["o"]]011', '[2,["f"],["o"]];01x', '[2,["f"],["o"]];2'])
def test_malformed_payloads(payload):
	with pytest.raises(MalformedPayloadError):
		hs.decode(payload)


def test_bits_into_missing_child():
	with pytest.raises(MalformedPayloadError):
		hs.decode('[2,1,["a"],2,["b"],["c"]];0001')


def test_non_string_leaves_rejected():
	with pytest.raises(MalformedPayloadError):
		hs.decode('[2,[1],[2]];01')


def test_malformed_payload_is_logged(caplog):
	with caplog.at_level(logging.WARNING, logger='huffman_service'):
		with pytest.raises(MalformedPayloadError):
			hs.decode('[2,["f"],["o"]];01x')
	assert 'cannot decode payload' in caplog.text


def test_stats():
	svc = _get_service()
	stats = svc.stats('aaabbc')
	assert stats.symbols == 6
	assert stats.distinct_symbols == 3
	assert stats.encoded_bits == len(svc.encode('aaabbc').split(';')[1])
	assert stats.bits_per_symbol == pytest.approx(1.5)
	assert stats.ratio == pytest.approx(9 / 48)


def test_stats_empty():
	stats = _get_service().stats('')
	assert stats.encoded_bits == 0
	assert stats.bits_per_symbol == 0.0
	assert stats.ratio == 0.0


@pytest.mark.timeout(120)
def test_roundtrip_large_input():
	rng = random.Random(42)
	text = ''.join(chr(rng.randrange(32, 400)) for _ in range(200 * 1024))
	assert hs.decode(hs.encode(text)) == text


def test_service_initializes_logic_attribute():
	svc = _get_service()
	assert isinstance(svc.logic, HuffmanLogic)
	tree = svc.logic.build_tree('foo')
	assert svc.logic.generate_codes(tree) == {'f': '0', 'o': '1'}
