"""
Decide the sheet grid, rotation and scale of a poster.
"""

# Standard Library
import dataclasses
import math
import sys

# local repo modules
import postscript_tiler as pst
import postscript_tiler.config


Box = pst.config.Box
Margin = pst.config.Margin
LayoutPlan = pst.config.LayoutPlan
LayoutError = pst.config.LayoutError
ScaleRangeError = pst.config.ScaleRangeError
SheetLimitError = pst.config.SheetLimitError

MAX_SHEETS = pst.config.MAX_SHEETS
MIN_SCALE = pst.config.MIN_SCALE
MAX_SCALE = pst.config.MAX_SCALE
POSTER_SAFETY_FACTOR = pst.config.POSTER_SAFETY_FACTOR


@dataclasses.dataclass(frozen=True)
class SheetCounts:
	columns: int
	rows: int

	@property
	def total(self) -> int:
		return self.columns * self.rows


@dataclasses.dataclass(frozen=True)
class Edges:
	left: bool
	bottom: bool
	right: bool
	top: bool


#============================================
def plural(count: int, word: str) -> str:
	if count == 1:
		return f"{count} {word}"
	return f"{count} {word}s"


#============================================
def scaled_sheet_counts(
	image: Box,
	white_margin: Margin,
	scale: float,
	drawable_width: float,
	drawable_height: float,
) -> tuple[SheetCounts, SheetCounts]:
	"""
	Count sheets for a user supplied scale factor.

	Args:
		image: Input image box.
		white_margin: Extra white margin around the scaled image.
		scale: Linear scale factor.
		drawable_width: Drawable width of one sheet.
		drawable_height: Drawable height of one sheet.

	Returns:
		Tuple of (unrotated, rotated) sheet counts.
	"""
	size_x = image.width * scale + 2.0 * white_margin.x
	size_y = image.height * scale + 2.0 * white_margin.y
	portrait = SheetCounts(
		columns=math.ceil(size_x / drawable_width),
		rows=math.ceil(size_y / drawable_height),
	)
	landscape = SheetCounts(
		columns=math.ceil(size_x / drawable_height),
		rows=math.ceil(size_y / drawable_width),
	)
	return portrait, landscape


#============================================
def orient_poster(poster: Box, image: Box) -> Box:
	"""
	Orient a requested poster size like the image it will carry.

	The poster is first normalized to portrait, then turned to landscape
	when the image itself is landscape.

	Args:
		poster: Requested poster box with origin at 0,0.
		image: Input image box.

	Returns:
		Oriented poster box.
	"""
	if poster.is_landscape:
		poster = poster.swapped()
	if image.is_landscape:
		poster = poster.swapped()
	return poster


#============================================
def poster_sheet_counts(poster: Box, media: Box) -> tuple[SheetCounts, SheetCounts]:
	"""
	Count sheets for a requested poster size.

	Counts are taken against the full media size with a safety factor, so
	a poster just slightly larger than a sheet multiple does not spill
	onto an extra row or column of thin slivers.

	Args:
		poster: Oriented poster box.
		media: Media box.

	Returns:
		Tuple of (unrotated, rotated) sheet counts.
	"""
	portrait = SheetCounts(
		columns=math.ceil(POSTER_SAFETY_FACTOR * poster.width / media.width),
		rows=math.ceil(POSTER_SAFETY_FACTOR * poster.height / media.height),
	)
	landscape = SheetCounts(
		columns=math.ceil(POSTER_SAFETY_FACTOR * poster.width / media.height),
		rows=math.ceil(POSTER_SAFETY_FACTOR * poster.height / media.width),
	)
	return portrait, landscape


#============================================
def plan_layout(
	image: Box,
	media: Box,
	margin: Margin,
	white_margin: Margin,
	scale: float | None = None,
	poster: Box | None = None,
	max_sheets: int = MAX_SHEETS,
	verbose: int = 0,
) -> LayoutPlan:
	"""
	Compute rows, columns, rotation, scale and the centred poster box.

	Exactly one of `scale` and `poster` must be given.

	Args:
		image: Input image box.
		media: Media box (portrait).
		margin: Cut margin per sheet.
		white_margin: White margin around the whole poster.
		scale: User scale factor.
		poster: User poster size.
		max_sheets: Sanity limit on the number of sheets.
		verbose: Verbosity level.

	Returns:
		Immutable LayoutPlan.
	"""
	if (scale is None) == (poster is None):
		raise ValueError("exactly one of scale and poster must be given")
	if image.width <= 0.0 or image.height <= 0.0:
		raise LayoutError(
			f"Input image should have positive size! Got {image.width:g} x {image.height:g}"
		)

	drawable_width = media.width - 2.0 * margin.x
	drawable_height = media.height - 2.0 * margin.y
	if drawable_width <= 0.0 or drawable_height <= 0.0:
		raise LayoutError(
			f"No drawable area left on the media: {drawable_width:g} x {drawable_height:g}"
		)

	if scale is not None:
		if not (MIN_SCALE <= scale <= MAX_SCALE):
			raise ScaleRangeError(f"Illegal scale value {scale:g}!")
		portrait, landscape = scaled_sheet_counts(
			image, white_margin, scale, drawable_width, drawable_height,
		)
	else:
		if poster.left != 0.0 or poster.bottom != 0.0:
			print("Poster lower-left coordinates are assumed 0!", file=sys.stderr)
			poster = Box(0.0, 0.0, poster.width, poster.height)
		if poster.width <= 0.0 or poster.height <= 0.0:
			raise LayoutError(
				f"Poster should have positive size! Got {poster.width:g} x {poster.height:g}"
			)
		poster = orient_poster(poster, image)
		portrait, landscape = poster_sheet_counts(poster, media)

	rotate = portrait.total > landscape.total
	chosen = landscape if rotate else portrait

	if verbose:
		orientation = "landscape" if rotate else "portrait"
		print(
			f"Deciding for {plural(chosen.columns, 'column')} and "
			f"{plural(chosen.rows, 'row')} of {orientation} pages.",
			file=sys.stderr,
		)

	if chosen.total > max_sheets:
		raise SheetLimitError(
			f"However {chosen.columns}x{chosen.rows} pages seems ridiculous to me! "
			f"(limit is {max_sheets})"
		)

	if rotate:
		total_width = chosen.columns * drawable_height
		total_height = chosen.rows * drawable_width
	else:
		total_width = chosen.columns * drawable_width
		total_height = chosen.rows * drawable_height

	if scale is None:
		scale_x = (total_width - 2.0 * white_margin.x) / image.width
		scale_y = (total_height - 2.0 * white_margin.y) / image.height
		scale = min(scale_x, scale_y)
		if scale <= 0.0:
			raise LayoutError(f"White margin leaves no room for the image (scale {scale:g})")
		if verbose:
			print(f"Deciding for a scale factor of {scale:g}", file=sys.stderr)

	size_x = scale * image.width
	size_y = scale * image.height
	left = (total_width - size_x) / 2.0
	bottom = (total_height - size_y) / 2.0

	return LayoutPlan(
		rows=chosen.rows,
		columns=chosen.columns,
		rotate=rotate,
		scale=scale,
		poster=Box(left, bottom, left + size_x, bottom + size_y),
		drawable_width=drawable_width,
		drawable_height=drawable_height,
	)


#============================================
def page_number(row: int, col: int, rows: int, cols: int, rotate: bool) -> int:
	"""
	Number a grid cell given in the frame its label is printed in.

	Args:
		row: 1-based row in the label frame.
		col: 1-based column in the label frame.
		rows: Row count in the label frame.
		cols: Column count in the label frame.
		rotate: Whether the sheets are printed rotated.

	Returns:
		1-based page number.
	"""
	if rotate:
		return (col - 1) * rows + row
	return (row - 1) * cols + col


#============================================
def label_cell(row: int, col: int, plan: LayoutPlan) -> tuple[int, int, int, int]:
	"""
	Map a poster cell to the row/column printed on its sheet.

	Rotated sheets are turned a quarter, so their rows run along the
	poster columns.

	Args:
		row: 1-based poster row.
		col: 1-based poster column.
		plan: Layout plan.

	Returns:
		Tuple of (label_row, label_col, label_rows, label_cols).
	"""
	if plan.rotate:
		return (col, row, plan.columns, plan.rows)
	return (row, col, plan.rows, plan.columns)


#============================================
def tile_page_number(row: int, col: int, plan: LayoutPlan) -> int:
	"""
	Page number of the tile at a poster cell, equal to its position in
	the row-major emission order.
	"""
	label_row, label_col, label_rows, label_cols = label_cell(row, col, plan)
	return page_number(label_row, label_col, label_rows, label_cols, plan.rotate)


#============================================
def neighbour_edges(row: int, col: int, plan: LayoutPlan) -> Edges:
	"""
	Find which drawable-area edges of a sheet touch a neighbouring sheet.

	Poster rows grow upward and columns to the right. A rotated sheet is
	turned a quarter counter-clockwise, so poster columns grow toward the
	sheet top and poster rows toward the sheet left.

	Args:
		row: 1-based poster row.
		col: 1-based poster column.
		plan: Layout plan.

	Returns:
		Edges flags in the sheet frame.
	"""
	if plan.rotate:
		return Edges(
			left=row < plan.rows,
			bottom=col > 1,
			right=row > 1,
			top=col < plan.columns,
		)
	return Edges(
		left=col > 1,
		bottom=row > 1,
		right=col < plan.columns,
		top=row < plan.rows,
	)
