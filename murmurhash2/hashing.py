""" Implementation of the 32 and 64 bit murmurhash version 2 functions (MurmurHash2 and MurmurHash64A)
"""
from typing import Iterable, Optional, Union

from .errors import BoundsError

ByteData = Union[bytes, bytearray, memoryview, Iterable[int]]

MASK_32 = (1 << 32) - 1
MASK_64 = (1 << 64) - 1

# mixing constants, they are not magic, they just happen to work well
M_32 = 0x5bd1e995
R_32 = 24
M_64 = 0xc6a4a7935bd1e995
R_64 = 47

DEFAULT_SEED_32 = 0x9747b28c
DEFAULT_SEED_64 = 0xe17a1465

TEXT_ENCODING = "utf-8"


def _as_bytes(data: ByteData) -> bytes:
	if isinstance(data, bytes):
		return data
	if isinstance(data, str):
		raise TypeError("cannot hash str directly, use hash32_text/hash64_text or encode it first")
	if isinstance(data, int):
		raise TypeError(f"expected a bytes-like object, got {type(data).__name__}")
	return bytes(data)


def _check_length(data: bytes, length: Optional[int]) -> int:
	if length is None:
		return len(data)
	if length < 0 or length > len(data):
		raise BoundsError(0, length, len(data))
	return length


def _read_le(data: bytes, offset: int, width: int) -> int:
	return int.from_bytes(data[offset:offset + width], "little")


def hash32(data: ByteData, length: Optional[int] = None, seed: int = DEFAULT_SEED_32) -> int:
	""" 32 bit murmurhash2 of the first `length` bytes of `data` (all of them if `length` is None)

	The seed is only used as a bit pattern, so negative seeds are accepted.
	The result is unsigned, use `to_signed(h, 32)` for the value the java version returns.
	Raises `BoundsError` if `length` does not fit in `data`.
	"""
	data = _as_bytes(data)
	length = _check_length(data, length)
	m = M_32

	h = (seed ^ length) & MASK_32

	aligned = length & ~3
	for i in range(0, aligned, 4):
		k = _read_le(data, i, 4)

		k = (k * m) & MASK_32
		k ^= k >> R_32
		k = (k * m) & MASK_32
		h = (h * m) & MASK_32
		h ^= k

	left = length - aligned

	if left >= 3:
		h ^= data[aligned + 2] << 16
	if left >= 2:
		h ^= data[aligned + 1] << 8
	if left >= 1:
		h ^= data[aligned]
		h = (h * m) & MASK_32

	h ^= h >> 13
	h = (h * m) & MASK_32
	h ^= h >> 15

	return h


def hash64(data: ByteData, length: Optional[int] = None, seed: int = DEFAULT_SEED_64) -> int:
	""" 64 bit murmurhash2 (MurmurHash64A) of the first `length` bytes of `data`

	Only the low 32 bits of `seed` are used, zero extended.
	Raises `BoundsError` if `length` does not fit in `data`.
	"""
	data = _as_bytes(data)
	length = _check_length(data, length)
	m = M_64

	h = (seed & MASK_32) ^ ((length * m) & MASK_64)

	aligned = length & ~7
	for i in range(0, aligned, 8):
		k = _read_le(data, i, 8)

		k = (k * m) & MASK_64
		k ^= k >> R_64
		k = (k * m) & MASK_64

		h ^= k
		h = (h * m) & MASK_64

	left = length - aligned
	if left:
		# most significant tail byte first
		for i in reversed(range(left)):
			h ^= data[aligned + i] << (i * 8)
		h = (h * m) & MASK_64

	h ^= h >> R_64
	h = (h * m) & MASK_64
	h ^= h >> R_64

	return h


def _encode_text(text: str, start: int, length: Optional[int]) -> bytes:
	if length is None:
		length = len(text) - start
	if start < 0 or length < 0 or start + length > len(text):
		raise BoundsError(start, length, len(text))
	return text[start:start + length].encode(TEXT_ENCODING)


def hash32_text(text: str, start: int = 0, length: Optional[int] = None, *, seed: int = DEFAULT_SEED_32) -> int:
	""" 32 bit murmurhash2 of `text[start:start + length]` encoded as utf-8
	"""
	return hash32(_encode_text(text, start, length), seed=seed)


def hash64_text(text: str, start: int = 0, length: Optional[int] = None, *, seed: int = DEFAULT_SEED_64) -> int:
	""" 64 bit murmurhash2 of `text[start:start + length]` encoded as utf-8
	"""
	return hash64(_encode_text(text, start, length), seed=seed)


def to_signed(value: int, bits: int) -> int:
	""" Reinterpret an unsigned hash as a two's complement number, like the java version returns it
	"""
	if value & (1 << (bits - 1)):
		value -= 1 << bits
	return value
