"""
Scan the DSC header of a PostScript file for its bounding box and the
document property lines worth copying into the poster header.
"""

# Standard Library
import dataclasses
import enum
import math
import sys
import typing

# local repo modules
import postscript_tiler as pst
import postscript_tiler.config


Box = pst.config.Box
MAX_LINE_LENGTH = pst.config.MAX_LINE_LENGTH

ATEND = b"(atend)"
BOUNDING_BOX = b"%%BoundingBox:"
DOCUMENT_PREFIX = b"%%Document"
CONTINUATION = b"%%+"
END_COMMENTS = b"%%EndComments"
TRAILER = b"%%Trailer"
BEGIN_MARKERS = (b"%%BeginDocument", b"%%BeginData")
END_MARKERS = (b"%%EndDocument", b"%%EndData")
# the poster header declares its own media
SKIPPED_PROPERTIES = (b"%%DocumentMedia",)


class ScanState(enum.Enum):
	SCANNING_HEADER = "scanning-header"
	AWAITING_DEFERRED = "awaiting-deferred"
	DONE = "done"


class Section(enum.Enum):
	HEADER = "header"
	BODY = "body"
	TRAILER = "trailer"


class BoundingBoxStatus(enum.Enum):
	KNOWN = "known"
	DEFERRED = "deferred"
	ABSENT = "absent"


@dataclasses.dataclass(frozen=True)
class BoundingBoxResult:
	status: BoundingBoxStatus
	box: Box | None = None

	@classmethod
	def known(cls, box: Box) -> "BoundingBoxResult":
		return cls(BoundingBoxStatus.KNOWN, box)

	@property
	def is_known(self) -> bool:
		return self.status is BoundingBoxStatus.KNOWN


DEFERRED = BoundingBoxResult(BoundingBoxStatus.DEFERRED)
ABSENT = BoundingBoxResult(BoundingBoxStatus.ABSENT)


@dataclasses.dataclass(frozen=True)
class ScanResult:
	bounding_box: BoundingBoxResult
	passthrough: list[bytes]


#============================================
def iter_bounded_lines(stream: typing.BinaryIO, limit: int = MAX_LINE_LENGTH) -> typing.Iterator[bytes]:
	"""
	Yield lines truncated to `limit` bytes, without line terminators.

	The remainder of an oversized line is read and discarded so it never
	shows up as a line of its own.

	Args:
		stream: Binary input stream.
		limit: Maximum number of bytes kept per line.

	Yields:
		Truncated line content.
	"""
	while True:
		chunk = stream.readline(limit)
		if not chunk:
			return
		if len(chunk) == limit and not chunk.endswith(b"\n"):
			tail = chunk
			while tail and not tail.endswith(b"\n"):
				tail = stream.readline(limit)
		yield chunk.rstrip(b"\r\n")


#============================================
def parse_bounding_box(value: bytes) -> Box | None:
	"""
	Parse the four numbers of a %%BoundingBox value.

	Args:
		value: Text after the keyword.

	Returns:
		Box, or None if the value is malformed.
	"""
	fields = value.split()
	if len(fields) < 4:
		return None
	try:
		numbers = [float(field) for field in fields[:4]]
	except ValueError:
		return None
	if not all(math.isfinite(number) for number in numbers):
		return None
	return Box(numbers[0], numbers[1], numbers[2], numbers[3])


#============================================
def property_value(line: bytes) -> bytes:
	"""
	Return the value part of a '%%Document...: value' line.
	"""
	keyword_end = len(line)
	for index in range(len(DOCUMENT_PREFIX), len(line)):
		if line[index:index + 1] in (b" ", b"\t"):
			keyword_end = index
			break
	return line[keyword_end:].lstrip(b" \t")


#============================================
def scan(stream: typing.BinaryIO, verbose: int = 0) -> ScanResult:
	"""
	Read structural comments from a PostScript stream.

	Header scanning stops at %%EndComments or the first non-comment line,
	unless a value was declared (atend); then the whole file is read so
	the trailer can supply it. Declarations inside embedded documents
	(level > 0) and inside the body are ignored.

	Args:
		stream: Binary input stream positioned at its start.
		verbose: Verbosity level.

	Returns:
		ScanResult with the bounding box state and passthrough lines.
	"""
	state = ScanState.SCANNING_HEADER
	section = Section.HEADER
	level = 0
	continuation = False
	bbox_deferred = False
	box: Box | None = None
	passthrough: list[bytes] = []

	for line in iter_bounded_lines(stream):
		if not line.startswith(b"%"):
			continuation = False
			if section is Section.HEADER:
				section = Section.BODY
			if state is ScanState.SCANNING_HEADER:
				state = ScanState.DONE
				break
			continue

		if continuation and line.startswith(CONTINUATION):
			passthrough.append(line)
			continue
		continuation = False

		honored = section is not Section.BODY and level == 0
		if line.startswith(END_COMMENTS):
			section = Section.BODY
			if state is ScanState.SCANNING_HEADER:
				state = ScanState.DONE
				break
		elif line.startswith(BEGIN_MARKERS):
			level += 1
		elif line.startswith(END_MARKERS):
			level = max(0, level - 1)
		elif line.startswith(TRAILER) and level == 0:
			section = Section.TRAILER
		elif line.startswith(BOUNDING_BOX) and honored:
			value = line[len(BOUNDING_BOX):].lstrip(b" \t")
			if value.startswith(ATEND):
				bbox_deferred = True
				state = ScanState.AWAITING_DEFERRED
				continue
			parsed = parse_bounding_box(value)
			if parsed is None:
				if verbose:
					print(f"Ignoring malformed bounding box: {line!r}", file=sys.stderr)
				continue
			box = parsed
		elif line.startswith(DOCUMENT_PREFIX) and honored:
			if property_value(line).startswith(ATEND):
				state = ScanState.AWAITING_DEFERRED
				continue
			if line.startswith(SKIPPED_PROPERTIES):
				continue
			passthrough.append(line)
			continuation = True

	if box is not None:
		result = BoundingBoxResult.known(box)
	elif bbox_deferred:
		result = DEFERRED
	else:
		result = ABSENT
	return ScanResult(bounding_box=result, passthrough=passthrough)
