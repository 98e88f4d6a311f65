class BoundsError(IndexError):
	""" Raised when a requested range does not fit inside the input
	"""

	def __init__(self, start: int, length: int, size: int):
		super().__init__(f"range [{start}, {start} + {length}) does not fit in input of size {size}")
		self.start = start
		self.length = length
		self.size = size
