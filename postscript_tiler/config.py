"""
Shared configuration, constants, data types and errors.
"""

# Standard Library
import dataclasses
import typing


PROGRAM_NAME = "tile"

DEFAULT_MEDIA = "A4"
DEFAULT_IMAGE = "A4"
DEFAULT_CUT_MARGIN = "5%"
DEFAULT_WHITE_MARGIN = "0"
DEFAULT_LANGUAGE = "en"

# scanner only classifies this many leading bytes of each line
MAX_LINE_LENGTH = 1024
MAX_SHEETS = 400
MIN_SCALE = 0.01
MAX_SCALE = 1.0e6
POSTER_SAFETY_FACTOR = 0.95
MIN_MEDIA_SIZE = 10.0

CLIP_MARGIN = 6.0
LABEL_SIZE = 9.0
STRING_BUFFER_SIZE = 10
TILE_DICT_SIZE = 250
END_OF_TRANSMISSION = b"\x04"

DEFAULT_FONT = "Helvetica"
BRAND_NAME = "freesewing"
BRAND_URL = "freesewing.org"
DRAFT_URL_PREFIX = "freesewing.org/drafts/"

COVER_TITLE_SIZE = 42.0
COVER_TITLE_MIN_SIZE = 12.0
COVER_HEADER_HEIGHT = 106.0
COVER_LOGO_WIDTH = 49.0
COVER_LOGO_HEIGHT = 53.0
GRID_LABEL_FRACTION = 0.08
GRID_NUMBER_FRACTION = 0.5


#============================================
class TilerError(Exception):
	"""
	Base class for all fatal tiling errors.
	"""


class BoxSpecError(TilerError):
	"""
	A box, unit or margin specification cannot be understood.
	"""


class UnknownUnitError(BoxSpecError):
	pass


class AmbiguousUnitError(BoxSpecError):
	pass


class NegativeSizeError(BoxSpecError):
	pass


class RangeError(TilerError):
	"""
	A parsed or computed value is outside its sane range.
	"""


class MarginRangeError(RangeError):
	pass


class ScaleRangeError(RangeError):
	pass


class SheetLimitError(RangeError):
	pass


class MediaSizeError(RangeError):
	pass


class LayoutError(RangeError):
	pass


class ContentSourceError(TilerError):
	"""
	The content stream could not be opened or read.
	"""


#============================================
@dataclasses.dataclass(frozen=True)
class Box:
	left: float
	bottom: float
	right: float
	top: float

	@property
	def width(self) -> float:
		return self.right - self.left

	@property
	def height(self) -> float:
		return self.top - self.bottom

	@property
	def is_landscape(self) -> bool:
		return self.height < self.width

	def swapped(self) -> "Box":
		"""
		Exchange the x and y axes.

		Returns:
			New Box with left/bottom and right/top exchanged.
		"""
		return Box(self.bottom, self.left, self.top, self.right)

	def as_tuple(self) -> tuple[float, float, float, float]:
		return (self.left, self.bottom, self.right, self.top)


@dataclasses.dataclass(frozen=True)
class Margin:
	x: float
	y: float


@dataclasses.dataclass(frozen=True)
class LayoutPlan:
	rows: int
	columns: int
	rotate: bool
	scale: float
	poster: Box
	drawable_width: float
	drawable_height: float

	@property
	def sheet_count(self) -> int:
		return self.rows * self.columns

	@property
	def page_count(self) -> int:
		# cover sheet plus one page per tile
		return 1 + self.sheet_count

	@property
	def cell_width(self) -> float:
		"""
		Drawable width of one sheet measured along the poster x axis.
		"""
		if self.rotate:
			return self.drawable_height
		return self.drawable_width

	@property
	def cell_height(self) -> float:
		if self.rotate:
			return self.drawable_width
		return self.drawable_height

	@property
	def total_width(self) -> float:
		return self.columns * self.cell_width

	@property
	def total_height(self) -> float:
		return self.rows * self.cell_height


@dataclasses.dataclass(frozen=True)
class RunConfig:
	input_name: str
	media_name: str
	media: Box
	image: Box
	cut_margin: Margin
	white_margin: Margin
	scale: float | None
	poster: Box | None
	manual_feed: bool
	alignment: bool
	title: str
	handle: str
	verbose: int
	lookup: typing.Callable[[str], str]
