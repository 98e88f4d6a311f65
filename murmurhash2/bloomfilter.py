import logging
import math
from base64 import b64decode, b64encode
from typing import Callable, Dict, List, Optional

from bitarray import bitarray

from .hashing import hash32, hash64

logger = logging.getLogger(__name__)

HashFunction = Callable[[bytes, int], int]


def _murmur2_32(val: bytes, seed: int) -> int:
	return hash32(val, seed=seed)


def _murmur2_64(val: bytes, seed: int) -> int:
	return hash64(val, seed=seed)


HASH_FUNCTIONS: Dict[str, HashFunction] = {
	"murmur2_32": _murmur2_32,
	"murmur2_64": _murmur2_64,
}


def hash_by_name(name: str) -> HashFunction:
	try:
		return HASH_FUNCTIONS[name]
	except KeyError:
		raise ValueError(f"unknown hash function {name!r}, expected one of {sorted(HASH_FUNCTIONS)}") from None


def _check_sizing(n: int, epsilon: float):
	if n < 0:
		raise ValueError(f"number of elements must not be negative, got {n}")
	if not 0 < epsilon < 1:
		raise ValueError(f"false positive probability must be in (0, 1), got {epsilon}")


class BitVector(bitarray):
	""" bitarray that starts zeroed, with oneline constructors from bytes and ints
	"""
	def __init__(self, *args, **kwargs):
		self.setall(0)

	@classmethod
	def zeros(cls, size: int) -> "BitVector":
		return cls(size)

	@classmethod
	def from_bytes(cls, a: bytes) -> "BitVector":
		""" Create a bit vector from bytes, big endian bit order within each byte
		"""
		b = cls(0)
		b.frombytes(a)
		return b

	@classmethod
	def from_int(cls, a: int, *, size: int = 0) -> "BitVector":
		""" Create bit vector from int, bit at index 0 (lsb) will be bit at index 0 for the vector
		"""
		s = max(size, a.bit_length())
		r = cls.from_bytes(a.to_bytes((s + 7) // 8, "big"))
		r.reverse()
		return r


class BloomFilter:
	""" Bloom filter
	`bitvec`: bit vector with at least `m` bits
	`m`: number of bits in use
	`hash`: the hash function to use, with the signature (data: bytes, seed: int) -> int
	`seeds`: list of seeds in order to have k different hash functions
	`hash_name`: name the hash is stored under in the json form
	"""
	bitvec: BitVector
	m: int
	hash: HashFunction
	seeds: List[int]
	hash_name: Optional[str]

	def __init__(self, bitvec: BitVector, m: int, seeds: List[int], hash: Optional[HashFunction] = None, hash_name: Optional[str] = "murmur2_32"):
		self.bitvec = bitvec
		self.m = m
		self.seeds = list(seeds)
		self.hash_name = hash_name
		self.hash = hash if hash is not None else hash_by_name(hash_name)

	@classmethod
	def create(cls, n: int, epsilon: float, *, hash_name: str = "murmur2_32") -> "BloomFilter":
		""" Empty filter sized for `n` elements and false positive probability `epsilon`
		"""
		m = cls.optimal_m(n, epsilon)
		k = cls.optimal_k(n, epsilon)
		logger.debug("Sizing bloom filter for n=%d epsilon=%s: m=%d k=%d", n, epsilon, m, k)
		return cls(BitVector.zeros(m), m, seeds=list(range(k)), hash_name=hash_name)

	def _positions(self, val: bytes):
		for seed in self.seeds:
			yield self.hash(val, seed) % self.m

	def __contains__(self, val: bytes) -> bool:
		""" Check if the bloom filter contains `val`
		"""
		return all(self.bitvec[i] for i in self._positions(val))

	def add(self, val: bytes):
		""" Add `val` to the bloom filter
		"""
		for i in self._positions(val):
			self.bitvec[i] = 1

	def to_json(self, **kwargs) -> dict:
		""" Return a dict that is json serializable and add eventual kwargs:
		{
		"hash_seeds": [0, 1, 2, 3],
		"filter_length": 87,
		"bitvector": "GyufZL3uGz01Gsw=",
		"hash_function": "murmur2_32"
		}
		`hash_function` is left out for filters with a custom hash, pass `hash=` back to `from_json` for those
		"""
		json = dict()
		json["hash_seeds"] = self.seeds
		json["filter_length"] = self.m
		json["bitvector"] = b64encode(self.bitvec.tobytes()).decode()
		if self.hash_name is not None:
			json["hash_function"] = self.hash_name
		return {**json, **kwargs}

	@classmethod
	def from_json(cls, json: dict, **kwargs) -> "BloomFilter":
		""" Create instance of BloomFilter from the dict produced by `to_json`, eventual kwargs go to the constructor
		"""
		kwargs.setdefault("hash_name", json.get("hash_function", None if "hash" in kwargs else "murmur2_32"))
		bitvec = BitVector.from_bytes(b64decode(json["bitvector"]))
		return cls(bitvec=bitvec, m=json["filter_length"], seeds=json["hash_seeds"], **kwargs)

	@staticmethod
	def optimal_m(n: int, epsilon: float) -> int:
		""" Calculate size of the bit array `m` given the number of elements and the desired false positive probability
		"""
		_check_sizing(n, epsilon)
		m = -n * math.log(epsilon) / math.pow(math.log(2), 2)
		# an empty filter still needs one bit to index into
		return max(1, math.ceil(m))

	@staticmethod
	def optimal_k(n: int, epsilon: float) -> int:
		""" Calculate number of hash functions `k` given the number of elements and the desired false positive probability
		"""
		_check_sizing(n, epsilon)
		k = -math.log2(epsilon)
		return math.ceil(k)
