"""
Write the poster document: DSC header, prolog, setup, cover page and one
page per tile, each embedding the original content.
"""

# Standard Library
import dataclasses
import json
import pathlib
import sys
import typing
import unicodedata

# PIP3 modules
import reportlab.pdfbase.pdfmetrics

# local repo modules
import postscript_tiler as pst
import postscript_tiler.config
import postscript_tiler.lang
import postscript_tiler.layout
import postscript_tiler.prolog
import postscript_tiler.source


RunConfig = pst.config.RunConfig
LayoutPlan = pst.config.LayoutPlan
ContentSourceError = pst.config.ContentSourceError
ContentSource = pst.source.ContentSource

PROGRAM_NAME = pst.config.PROGRAM_NAME
DEFAULT_FONT = pst.config.DEFAULT_FONT
CLIP_MARGIN = pst.config.CLIP_MARGIN
LABEL_SIZE = pst.config.LABEL_SIZE
STRING_BUFFER_SIZE = pst.config.STRING_BUFFER_SIZE
TILE_DICT_SIZE = pst.config.TILE_DICT_SIZE
END_OF_TRANSMISSION = pst.config.END_OF_TRANSMISSION
BRAND_NAME = pst.config.BRAND_NAME
BRAND_URL = pst.config.BRAND_URL
DRAFT_URL_PREFIX = pst.config.DRAFT_URL_PREFIX
COVER_TITLE_SIZE = pst.config.COVER_TITLE_SIZE
COVER_TITLE_MIN_SIZE = pst.config.COVER_TITLE_MIN_SIZE
COVER_HEADER_HEIGHT = pst.config.COVER_HEADER_HEIGHT
COVER_LOGO_WIDTH = pst.config.COVER_LOGO_WIDTH
COVER_LOGO_HEIGHT = pst.config.COVER_LOGO_HEIGHT
GRID_LABEL_FRACTION = pst.config.GRID_LABEL_FRACTION
GRID_NUMBER_FRACTION = pst.config.GRID_NUMBER_FRACTION

CLOSE_OUT = b"/systemdict /showpage get exec\n%%EOF\n"


@dataclasses.dataclass(frozen=True)
class CoverTransform:
	scale: float
	left: float
	bottom: float
	top: float


@dataclasses.dataclass(frozen=True)
class ComposeResult:
	pages: int
	tiles: int
	deferred_eot: bool


#============================================
def normalize_text(value: str) -> str:
	"""
	Normalize text to printable ASCII for the standard PostScript fonts.

	Args:
		value: Input text.

	Returns:
		Normalized text.
	"""
	if not value:
		return ""
	replacements = {
		"×": "x",
		"÷": "/",
		"Ø": "O",
		"ø": "o",
		"ß": "ss",
		"°": "deg",
		"™": "TM",
		"®": "R",
		" ": " ",
		"–": "-",
		"—": "-",
	}
	for old, new in replacements.items():
		value = value.replace(old, new)
	value = unicodedata.normalize("NFKD", value)
	value = value.encode("ascii", "ignore").decode("ascii")
	return "".join(char for char in value if char.isprintable())


#============================================
def escape_ps_string(value: str) -> str:
	"""
	Quote text as a PostScript string literal.

	Args:
		value: Text, normalized to ASCII first.

	Returns:
		String literal including the parentheses.
	"""
	text = normalize_text(value)
	text = text.replace("\\", "\\\\").replace("(", "\\(").replace(")", "\\)")
	return f"({text})"


#============================================
def format_number(value: float) -> str:
	"""
	Format a number for PostScript without exponent notation.
	"""
	text = f"{value:.6f}".rstrip("0").rstrip(".")
	if text in ("-0", ""):
		return "0"
	return text


#============================================
def text_width(text: str, font_size: float) -> float:
	"""
	Width of text set in the label font.
	"""
	return reportlab.pdfbase.pdfmetrics.stringWidth(normalize_text(text), DEFAULT_FONT, font_size)


#============================================
def fit_font_size(text: str, max_width: float, font_size: float, min_font_size: float) -> float:
	"""
	Shrink a font size until the text fits the available width.

	Args:
		text: Text to set.
		max_width: Available width.
		font_size: Preferred font size.
		min_font_size: Smallest acceptable size.

	Returns:
		Font size.
	"""
	width = text_width(text, font_size)
	if width <= max_width or width <= 0.0:
		return font_size
	return max(min_font_size, font_size * max_width / width)


#============================================
def compute_cover_transform(config: RunConfig, plan: LayoutPlan) -> CoverTransform:
	"""
	Fit the whole poster area on the cover sheet below its header band.

	Args:
		config: Run configuration.
		plan: Layout plan.

	Returns:
		CoverTransform relative to the drawable-area origin.
	"""
	preview_height = max(plan.drawable_height - COVER_HEADER_HEIGHT, plan.drawable_height / 2.0)
	scale = min(plan.drawable_width / plan.total_width, preview_height / plan.total_height)
	return CoverTransform(
		scale=scale,
		left=(plan.drawable_width - plan.total_width * scale) / 2.0,
		bottom=(preview_height - plan.total_height * scale) / 2.0,
		top=config.cut_margin.y + plan.drawable_height,
	)


#============================================
def cover_title(config: RunConfig) -> str:
	if config.title:
		return config.title
	return pathlib.PurePath(config.input_name).name


#============================================
def build_header(config: RunConfig, plan: LayoutPlan, passthrough: list[bytes]) -> bytes:
	"""
	Build the DSC comment header.

	Args:
		config: Run configuration.
		plan: Layout plan.
		passthrough: Document property lines copied from the input.

	Returns:
		Header bytes up to and including the summary comment.
	"""
	media_name = "".join(normalize_text(config.media_name).split()) or "Custom"
	media_width = int(config.media.width)
	media_height = int(config.media.height)
	lines = [
		"%!PS-Adobe-3.0",
		f"%%Creator: {PROGRAM_NAME}",
		f"%%Title: {normalize_text(cover_title(config))}",
	]
	head = "\n".join(lines) + "\n"
	body = "".join(line.decode("latin-1") + "\n" for line in passthrough)
	tail_lines = [
		f"%%Pages: {plan.page_count}",
		f"%%DocumentMedia: {media_name} {media_width} {media_height} 0 white ()",
		f"%%BoundingBox: 0 0 {media_width} {media_height}",
		"%%EndComments",
		"",
		"% Print poster {} in {}x{} tiles with {:.3g} magnification".format(
			normalize_text(config.input_name), plan.rows, plan.columns, plan.scale,
		),
	]
	tail = "\n".join(tail_lines) + "\n"
	return head.encode("ascii") + body.encode("latin-1") + tail.encode("ascii")


#============================================
def build_setup(config: RunConfig, plan: LayoutPlan) -> str:
	"""
	Build the %%BeginSetup section holding every run-specific value the
	prolog procedures use.

	Args:
		config: Run configuration.
		plan: Layout plan.

	Returns:
		Setup text.
	"""
	lookup = config.lookup
	cover = compute_cover_transform(config, plan)
	left_margin = config.cut_margin.x
	bottom_margin = config.cut_margin.y
	grid_base = min(plan.cell_width, plan.cell_height)
	title = cover_title(config)
	title_size = fit_font_size(title, plan.drawable_width, COVER_TITLE_SIZE, COVER_TITLE_MIN_SIZE)
	brand_x = left_margin + plan.drawable_width - text_width(BRAND_URL, LABEL_SIZE)

	manual_feed = ""
	if config.manual_feed:
		manual_feed = "	dup /ManualFeed true put\n"

	numbers = [
		("sfactor", plan.scale),
		("leftmargin", left_margin),
		("botmargin", bottom_margin),
		("pagewidth", plan.drawable_width),
		("pageheight", plan.drawable_height),
		("cellwidth", plan.cell_width),
		("cellheight", plan.cell_height),
		("imagexl", config.image.left),
		("imageyb", config.image.bottom),
		("posterxl", plan.poster.left),
		("posteryb", plan.poster.bottom),
		("clipmargin", CLIP_MARGIN),
		("labelsize", LABEL_SIZE),
		("covertop", cover.top),
		("coverscale", cover.scale),
		("coverxl", cover.left),
		("coveryb", cover.bottom),
		("gridlabelsize", grid_base * GRID_LABEL_FRACTION),
		("gridnumbersize", grid_base * GRID_NUMBER_FRACTION),
		("titlesize", title_size),
		("logox", left_margin + plan.drawable_width - COVER_LOGO_WIDTH),
		("logoy", cover.top - COVER_LOGO_HEIGHT),
		("brandurlx", brand_x),
	]
	strings = [
		("pageword", lookup(pst.lang.PROMPT_PAGE) + " "),
		("rowword", lookup(pst.lang.PROMPT_ROW) + " "),
		("columnword", ", " + lookup(pst.lang.PROMPT_COLUMN) + " "),
		("coverword", lookup(pst.lang.PROMPT_COVER)),
		("tagline", lookup(pst.lang.PROMPT_TAGLINE)),
		("brandname", BRAND_NAME),
		("brandurl", BRAND_URL),
		("drafturl", DRAFT_URL_PREFIX),
		("patterntitle", title),
		("patternhandle", config.handle),
	]

	parts = [
		"%%BeginSetup\n",
		"% Try to inform the printer about the desired media size:\n",
		"/setpagedevice where	% level-2 page commands available...\n",
		"{	pop		% ignore where found\n",
		f"	3 dict dup /PageSize [ {int(config.media.width)} {int(config.media.height)} ] put\n",
		"	dup /Duplex false put\n",
		manual_feed,
		"	setpagedevice\n",
		"} if\n",
	]
	for name, value in numbers:
		parts.append(f"/{name} {format_number(value)} def\n")
	parts.append(f"/do_turn {'true' if plan.rotate else 'false'} def\n")
	parts.append(f"/strg {STRING_BUFFER_SIZE} string def\n")
	for name, value in strings:
		parts.append(f"/{name} {escape_ps_string(value)} def\n")
	parts.append(
		f"/tiledict {TILE_DICT_SIZE} dict def\n"
		"tiledict begin\n"
		"% delay users showpage until cropmark is printed.\n"
		"/showpage {} def\n"
		"/setpagedevice { pop } def\n"
		"end\n"
		"/Helvetica findfont labelsize scalefont setfont\n"
		"%%EndSetup\n"
	)
	return "".join(parts)


#============================================
def embed_content(source: ContentSource, out: typing.BinaryIO) -> bool:
	"""
	Embed one fresh copy of the content between DSC document markers.

	Args:
		source: Rewindable content source.
		out: Binary output sink.

	Returns:
		True if the content carried a trailing control-D.
	"""
	name = normalize_text(source.name)
	out.write(f"%%BeginDocument: {name}\n".encode("ascii"))
	try:
		with source.open() as stream:
			found_eot = pst.source.relay(stream, out)
	except ContentSourceError as error:
		out.write(CLOSE_OUT)
		raise ContentSourceError(f"content of '{source.name}' became unreadable: {error}") from error
	out.write(b"\n%%EndDocument\n")
	return found_eot


#============================================
def write_cover(
	plan: LayoutPlan,
	source: ContentSource,
	out: typing.BinaryIO,
	verbose: int = 0,
) -> bool:
	"""
	Write the cover page: a preview of the poster with its sheet grid.

	Returns:
		True if the content carried a trailing control-D.
	"""
	if verbose:
		print("print page 1", file=sys.stderr)
	out.write(b"\n%%Page: 1 1\ncoverprolog\n")
	found_eot = embed_content(source, out)
	lines = ["coverimagedone"]
	for row in range(1, plan.rows + 1):
		for col in range(1, plan.columns + 1):
			label_row, label_col, _rows, _cols = pst.layout.label_cell(row, col, plan)
			page = pst.layout.tile_page_number(row, col, plan)
			lines.append(f"{row} {col} {page} {label_row} {label_col} covergrid")
	lines.append("coverepilog")
	out.write(("\n".join(lines) + "\n").encode("ascii"))
	return found_eot


#============================================
def write_tile(
	row: int,
	col: int,
	sheet: int,
	config: RunConfig,
	plan: LayoutPlan,
	source: ContentSource,
	out: typing.BinaryIO,
) -> bool:
	"""
	Write the page for one poster cell.

	Args:
		row: 1-based poster row.
		col: 1-based poster column.
		sheet: Physical page number in the document.
		config: Run configuration.
		plan: Layout plan.
		source: Rewindable content source.
		out: Binary output sink.

	Returns:
		True if the content carried a trailing control-D.
	"""
	if config.verbose:
		print(f"print page {sheet}", file=sys.stderr)
	out.write(f"\n%%Page: {sheet} {sheet}\n{row} {col} tileprolog\n".encode("ascii"))
	found_eot = embed_content(source, out)
	label_row, label_col, _rows, _cols = pst.layout.label_cell(row, col, plan)
	page = pst.layout.tile_page_number(row, col, plan)
	arguments = [str(page), str(label_row), str(label_col)]
	if config.alignment:
		edges = pst.layout.neighbour_edges(row, col, plan)
		for flag in (edges.left, edges.bottom, edges.right, edges.top):
			arguments.append("true" if flag else "false")
	arguments.append("tileepilog")
	out.write((" ".join(arguments) + "\n").encode("ascii"))
	return found_eot


#============================================
def compose(
	config: RunConfig,
	plan: LayoutPlan,
	source: ContentSource,
	passthrough: list[bytes],
	out: typing.BinaryIO,
) -> ComposeResult:
	"""
	Write the complete poster document.

	Pages are the cover followed by the tiles in row-major order, so the
	%%Pages count declared up front is always 1 + rows * columns.

	Args:
		config: Run configuration.
		plan: Layout plan.
		source: Rewindable content source.
		passthrough: Document property lines copied from the input.
		out: Binary output sink.

	Returns:
		ComposeResult.
	"""
	out.write(build_header(config, plan, passthrough))
	out.write(pst.prolog.build_prolog(config.alignment).encode("ascii"))
	out.write(build_setup(config, plan).encode("ascii"))

	deferred_eot = write_cover(plan, source, out, config.verbose)
	sheet = 2
	for row in range(1, plan.rows + 1):
		for col in range(1, plan.columns + 1):
			if write_tile(row, col, sheet, config, plan, source, out):
				deferred_eot = True
			sheet += 1

	out.write(b"%%Trailer\n%%EOF\n")
	if deferred_eot:
		out.write(END_OF_TRANSMISSION)

	return ComposeResult(pages=sheet - 1, tiles=sheet - 2, deferred_eot=deferred_eot)


#============================================
def write_manifest(
	manifest_path: pathlib.Path,
	config: RunConfig,
	plan: LayoutPlan,
	result: ComposeResult,
) -> None:
	"""
	Write a manifest JSON file describing the poster layout.

	Args:
		manifest_path: Output path.
		config: Run configuration.
		plan: Layout plan.
		result: Compose result.
	"""
	data = {
		"input": config.input_name,
		"pages": result.pages,
		"tiles": result.tiles,
		"deferred_eot": result.deferred_eot,
		"layout": {
			"rows": plan.rows,
			"columns": plan.columns,
			"rotate": plan.rotate,
			"scale": plan.scale,
			"poster": list(plan.poster.as_tuple()),
			"drawable_width": plan.drawable_width,
			"drawable_height": plan.drawable_height,
		},
		"media": {
			"name": config.media_name,
			"box": list(config.media.as_tuple()),
		},
		"image": list(config.image.as_tuple()),
		"cut_margin": [config.cut_margin.x, config.cut_margin.y],
		"white_margin": [config.white_margin.x, config.white_margin.y],
		"alignment": config.alignment,
		"manual_feed": config.manual_feed,
		"sheets": [
			{
				"row": row,
				"column": col,
				"page": pst.layout.tile_page_number(row, col, plan),
			}
			for row in range(1, plan.rows + 1)
			for col in range(1, plan.columns + 1)
		],
	}
	with manifest_path.open("w", encoding="utf-8") as handle:
		json.dump(data, handle, indent=2, sort_keys=True)
