""" Spark helpers built on murmurhash2: partitioning RDDs by key and building one bloom filter per key
"""
import logging
from typing import Any, Callable, Dict, Hashable, Iterable, List, Optional, Tuple, Union

import pyspark

from .bloomfilter import BitVector, BloomFilter, HashFunction, hash_by_name
from .hashing import DEFAULT_SEED_32, TEXT_ENCODING, hash32

logger = logging.getLogger(__name__)

Key = Union[bytes, bytearray, str, int]


def key_bytes(key: Key) -> bytes:
	""" Bytes a key is hashed as: bytes as they are, str as utf-8, int as its decimal text
	"""
	if isinstance(key, (bytes, bytearray)):
		return bytes(key)
	if isinstance(key, str):
		return key.encode(TEXT_ENCODING)
	if isinstance(key, int) and not isinstance(key, bool):
		return str(key).encode(TEXT_ENCODING)
	raise TypeError(f"cannot partition on key of type {type(key).__name__}")


class MurmurPartitioner:
	""" Partition function for `RDD.partitionBy`, spark takes the result modulo the number of partitions
	"""
	def __init__(self, seed: int = DEFAULT_SEED_32):
		self.seed = seed

	def __call__(self, key: Key) -> int:
		return hash32(key_bytes(key), seed=self.seed)

	def __eq__(self, other) -> bool:
		return isinstance(other, MurmurPartitioner) and other.seed == self.seed

	def __hash__(self) -> int:
		return hash((MurmurPartitioner, self.seed))


def murmur_partitioner(seed: int = DEFAULT_SEED_32) -> Callable[[Key], int]:
	return MurmurPartitioner(seed)


def partition_by_murmur(rdd: pyspark.rdd.RDD, num_partitions: int, *, seed: int = DEFAULT_SEED_32) -> pyspark.rdd.RDD:
	""" Repartition a pair rdd so that records land in partition `hash32(key) % num_partitions`
	"""
	return rdd.partitionBy(num_partitions, murmur_partitioner(seed))


def bloom_bits(value: bytes, m: int, seeds: Iterable[int], hash: Optional[HashFunction] = None) -> int:
	""" Int with the bits set at the positions `value` occupies in a bloom filter of `m` bits
	"""
	if hash is None:
		hash = hash_by_name("murmur2_32")
	rv = 0
	for seed in seeds:
		rv |= 1 << (hash(value, seed) % m)
	return rv


def build_bloomfilters(dataset: pyspark.rdd.RDD, *, epsilon: float = 0.1, hash_name: str = "murmur2_32") -> Dict[Hashable, BloomFilter]:
	""" Given a rdd in the form `(key, value: bytes)` build one bloom filter for each key and return a dictionary mapping key -> bloomfilter
	"""
	counts = dataset.countByKey()
	sizes = {key: (BloomFilter.optimal_m(n, epsilon), BloomFilter.optimal_k(n, epsilon)) for key, n in counts.items()}
	logger.debug("Bloom filter sizes per key: %s", sizes)

	def setbits(x: Tuple[Hashable, bytes]) -> Tuple[Hashable, int]:
		key, value = x
		m, k = sizes[key]
		return key, bloom_bits(value, m, range(k), hash_by_name(hash_name))

	merged = dataset.map(setbits)\
		.reduceByKey(int.__or__)\
		.collect()

	bfs = dict()
	for key, ibitvec in merged:
		m, k = sizes[key]
		bitvec = BitVector.from_int(ibitvec, size=m)
		bfs[key] = BloomFilter(bitvec=bitvec, m=m, seeds=list(range(k)), hash_name=hash_name)
		logger.info("Built bloom filter for key %r: %d elements, m=%d, k=%d", key, counts[key], m, k)

	return bfs


def count_false_positives(bf: BloomFilter, key: Hashable, sample: List[Tuple[Any, bytes]]) -> Tuple[int, int]:
	""" Count false positives of the filter `bf` (built for `key`) over a sample of `(key, value)` records

	Records of `key` itself must be found, they are not counted.
	Returns `(false_positives, total)`.
	"""
	total, falsep = 0, 0
	for s_key, value in sample:
		if s_key == key:
			if value not in bf:
				raise ValueError(f"bloom filter for {key!r} is missing one of its own values")
			continue
		if value in bf:
			falsep += 1
		total += 1
	return falsep, total
