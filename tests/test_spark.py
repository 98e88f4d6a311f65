import pickle
import sys
import unittest
from collections import defaultdict
from functools import reduce
from pathlib import Path

sys.path.append(str(Path(__file__).parent.parent))

from murmurhash2 import DEFAULT_SEED_32, hash32
from murmurhash2.bloomfilter import BloomFilter
from murmurhash2.spark import (
	MurmurPartitioner,
	bloom_bits,
	build_bloomfilters,
	count_false_positives,
	key_bytes,
	murmur_partitioner,
	partition_by_murmur,
)


class LocalPairRDD:
	""" In-memory stand-in for the few pair rdd operations the helpers use """

	def __init__(self, records):
		self.records = list(records)
		self.partitioned_with = None

	def countByKey(self):
		counts = defaultdict(int)
		for key, _ in self.records:
			counts[key] += 1
		return counts

	def map(self, f):
		return LocalPairRDD(f(r) for r in self.records)

	def reduceByKey(self, f):
		groups = defaultdict(list)
		for key, value in self.records:
			groups[key].append(value)
		return LocalPairRDD((key, reduce(f, values)) for key, values in groups.items())

	def collect(self):
		return list(self.records)

	def partitionBy(self, num_partitions, partition_func):
		self.partitioned_with = (num_partitions, partition_func)
		return self


MOVIES = [
	(7, b"the godfather"), (7, b"casablanca"), (7, b"vertigo"),
	(5, b"alien 3"), (5, b"speed 2"),
	(9, b"seven samurai"),
]


class TestPartitioner(unittest.TestCase):

	def test_key_bytes(self):
		self.assertEqual(key_bytes(b"abc"), b"abc")
		self.assertEqual(key_bytes(bytearray(b"abc")), b"abc")
		self.assertEqual(key_bytes("héllo"), "héllo".encode("utf-8"))
		self.assertEqual(key_bytes(42), b"42")
		with self.assertRaises(TypeError):
			key_bytes(4.2)
		with self.assertRaises(TypeError):
			key_bytes(True)

	def test_partition_value(self):
		f = murmur_partitioner()
		self.assertEqual(f("hello world"), 0x48d0c363)
		self.assertEqual(f("hello world") % 8, 3)
		self.assertEqual(f(42), hash32(b"42"))
		self.assertEqual(murmur_partitioner(0)(b"abc"), 0x13577c9b)

	def test_partitioner_equality_and_pickling(self):
		self.assertEqual(murmur_partitioner(), MurmurPartitioner(DEFAULT_SEED_32))
		self.assertNotEqual(murmur_partitioner(0), murmur_partitioner(1))
		restored = pickle.loads(pickle.dumps(murmur_partitioner(5)))
		self.assertEqual(restored, murmur_partitioner(5))
		self.assertEqual(restored("abc"), hash32(b"abc", seed=5))

	def test_partition_by_murmur(self):
		rdd = LocalPairRDD(MOVIES)
		self.assertIs(partition_by_murmur(rdd, 4, seed=0), rdd)
		num, func = rdd.partitioned_with
		self.assertEqual(num, 4)
		self.assertEqual(func, MurmurPartitioner(0))


class TestBloomBuild(unittest.TestCase):

	def test_bloom_bits(self):
		m = 64
		expected = 0
		for seed in range(3):
			expected |= 1 << (hash32(b"heat", seed=seed) % m)
		self.assertEqual(bloom_bits(b"heat", m, range(3)), expected)

	def test_build_matches_local_filters(self):
		bfs = build_bloomfilters(LocalPairRDD(MOVIES), epsilon=0.1)
		self.assertEqual(set(bfs), {5, 7, 9})

		for key in bfs:
			values = [v for k, v in MOVIES if k == key]
			local = BloomFilter.create(len(values), 0.1)
			for v in values:
				local.add(v)
			self.assertEqual(bfs[key].m, local.m)
			self.assertEqual(bfs[key].seeds, local.seeds)
			for i in range(local.m):
				self.assertEqual(bfs[key].bitvec[i], local.bitvec[i])
			for v in values:
				self.assertIn(v, bfs[key])

	def test_count_false_positives(self):
		bfs = build_bloomfilters(LocalPairRDD(MOVIES), epsilon=0.1, hash_name="murmur2_64")
		falsep, total = count_false_positives(bfs[7], 7, MOVIES)
		self.assertEqual(total, 3)
		self.assertTrue(0 <= falsep <= total)

	def test_count_false_positives_detects_missing_member(self):
		bf = BloomFilter.create(1, 0.1)
		with self.assertRaises(ValueError):
			count_false_positives(bf, 7, [(7, b"never added")])


if __name__ == "__main__":
	unittest.main()
