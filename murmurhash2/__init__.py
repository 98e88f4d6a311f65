from .errors import BoundsError
from .hashing import (
	DEFAULT_SEED_32,
	DEFAULT_SEED_64,
	TEXT_ENCODING,
	hash32,
	hash32_text,
	hash64,
	hash64_text,
	to_signed,
)
