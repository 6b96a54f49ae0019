"""
CLI entry points for PostScript poster tiling.
"""

# Standard Library
import argparse
import pathlib
import sys
import time

# local repo modules
import postscript_tiler as pst
import postscript_tiler.boxspec
import postscript_tiler.compose
import postscript_tiler.config
import postscript_tiler.dsc_scan
import postscript_tiler.lang
import postscript_tiler.layout
import postscript_tiler.source


Box = pst.config.Box
RunConfig = pst.config.RunConfig
LayoutPlan = pst.config.LayoutPlan
TilerError = pst.config.TilerError
MediaSizeError = pst.config.MediaSizeError
ContentSource = pst.source.ContentSource
ScanResult = pst.dsc_scan.ScanResult
BoundingBoxStatus = pst.dsc_scan.BoundingBoxStatus

DEFAULT_MEDIA = pst.config.DEFAULT_MEDIA
DEFAULT_IMAGE = pst.config.DEFAULT_IMAGE
DEFAULT_CUT_MARGIN = pst.config.DEFAULT_CUT_MARGIN
DEFAULT_WHITE_MARGIN = pst.config.DEFAULT_WHITE_MARGIN
DEFAULT_LANGUAGE = pst.config.DEFAULT_LANGUAGE
MAX_SHEETS = pst.config.MAX_SHEETS
MIN_MEDIA_SIZE = pst.config.MIN_MEDIA_SIZE
STDIN_NAME = pst.source.STDIN_NAME
# argparse expands % in help strings
CUT_MARGIN_HELP_DEFAULT = DEFAULT_CUT_MARGIN.replace("%", "%%")

EPILOG = (
	"<box> is like 'A4', '3x3letter', '10x25cm', '200x200+10,10p'. "
	"<margin> is either a simple <box> or <number>%. "
	"Output is written to stdout unless -o is given."
)


#============================================
def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
	"""
	Parse command line arguments.

	-h is taken by the pattern handle, so help is only on --help.

	Args:
		argv: Argument list, defaults to sys.argv.

	Returns:
		Parsed argparse namespace.
	"""
	parser = argparse.ArgumentParser(
		prog=pst.config.PROGRAM_NAME,
		description="Tile a PostScript page onto several sheets with a cover page.",
		epilog=EPILOG,
		add_help=False,
	)
	parser.add_argument("input", help="PostScript file, or '-' for stdin.")
	parser.add_argument("--help", action="help", help="Show this help message and exit.")

	size_group = parser.add_argument_group("Sizes")
	size_group.add_argument("-m", "--media", dest="media_spec", default=None, help=f"Media paper size <box> (default {DEFAULT_MEDIA}).")
	size_group.add_argument("-i", "--image", dest="image_spec", default=None, help="Input image size <box> (default read from the input file).")
	size_group.add_argument("-p", "--poster", dest="poster_spec", default=None, help="Output poster size <box>.")
	size_group.add_argument("-s", "--scale", dest="scale", type=float, default=None, help="Linear scale factor for the poster.")
	size_group.add_argument("-c", "--cut-margin", dest="cut_margin_spec", default=None, help=f"Horizontal and vertical cut margin <margin> (default {CUT_MARGIN_HELP_DEFAULT}).")
	size_group.add_argument("-w", "--white-margin", dest="white_margin_spec", default=None, help="Additional white margin around the poster <margin>.")

	output_group = parser.add_argument_group("Output")
	output_group.add_argument("-o", "--output", dest="output_path", default=None, help="Output PostScript path.")
	output_group.add_argument("--manifest", dest="manifest_path", default=None, help="Output manifest JSON path.")
	output_group.add_argument("-t", "--title", dest="title", default="", help="Pattern title for the cover page.")
	output_group.add_argument("-h", "--handle", dest="handle", default="", help="Draft handle for the cover page.")
	output_group.add_argument("-l", "--language", dest="language", default=None, help="Language code for page labels (en, nl, fr).")
	output_group.add_argument("--lang-dir", dest="lang_dir", default=None, help="Directory holding tile.<code>.yml language files.")

	behavior_group = parser.add_argument_group("Behavior")
	behavior_group.add_argument("-v", "--verbose", dest="verbose", action="count", default=0, help="Be verbose, repeat for more.")
	behavior_group.add_argument("-a", "--alignment", dest="alignment", action="store_true", help="Add alignment marks.")
	behavior_group.add_argument("-f", "--manual-feed", dest="manual_feed", action="store_true", help="Ask manual feed on the printing device.")

	limit_group = parser.add_argument_group("Limits")
	limit_group.add_argument("--max-sheets", dest="max_sheets", type=int, default=MAX_SHEETS, help="Refuse layouts with more sheets than this.")

	args = parser.parse_args(argv)
	return args


#============================================
def resolve_spec(value: str | None, default: str, label: str, verbose: int) -> str:
	"""
	Return a user spec, or the default with a note when verbose.
	"""
	if value:
		return value
	if verbose:
		print(f"Using default {label} of {default}", file=sys.stderr)
	return default


#============================================
def resolve_media(media_spec: str, verbose: int = 0) -> Box:
	"""
	Parse and check the media size.

	Args:
		media_spec: Media box spec.
		verbose: Verbosity level.

	Returns:
		Media Box.
	"""
	media = pst.boxspec.parse_box(media_spec, verbose=verbose)
	if media.is_landscape:
		raise MediaSizeError("Media should always be specified in portrait format!")
	if media.width <= MIN_MEDIA_SIZE or media.height <= MIN_MEDIA_SIZE:
		raise MediaSizeError(f"Media size is ridiculous! Got {media.width:g} x {media.height:g}")
	return media


#============================================
def resolve_image(scan_result: ScanResult, image_spec: str | None, verbose: int = 0) -> Box:
	"""
	Decide the input image box.

	An explicit -i wins; otherwise the scanned bounding box is used. A
	bounding box promised with (atend) but never given, or no bounding box
	at all, falls back to the default image size.

	Args:
		scan_result: Result of the header scan.
		image_spec: User image box spec, or None.
		verbose: Verbosity level.

	Returns:
		Image Box.
	"""
	if image_spec:
		image = pst.boxspec.parse_box(image_spec, verbose=verbose)
	elif scan_result.bounding_box.is_known:
		image = scan_result.bounding_box.box
	else:
		if scan_result.bounding_box.status is BoundingBoxStatus.DEFERRED:
			print("Bounding box was deferred to the trailer but never given", file=sys.stderr)
		if verbose:
			print(f"Using default input image of {DEFAULT_IMAGE}", file=sys.stderr)
		image = pst.boxspec.parse_box(DEFAULT_IMAGE, verbose=verbose)

	if verbose > 1:
		print(
			"   Input image is: [{:g},{:g},{:g},{:g}]".format(*image.as_tuple()),
			file=sys.stderr,
		)
	return image


#============================================
def open_source(input_name: str) -> ContentSource:
	if input_name == STDIN_NAME:
		return ContentSource.from_stream(sys.stdin.buffer)
	return ContentSource.from_path(pathlib.Path(input_name))


#============================================
def build_run_config(args: argparse.Namespace, source: ContentSource) -> tuple[RunConfig, LayoutPlan, list[bytes]]:
	"""
	Validate every option, scan the input and plan the layout.

	Nothing is written to the output before this returns.

	Args:
		args: Parsed argparse namespace.
		source: Rewindable content source.

	Returns:
		Tuple of (RunConfig, LayoutPlan, passthrough lines).
	"""
	verbose = args.verbose
	scale = args.scale
	poster_spec = args.poster_spec
	if scale is not None and poster_spec:
		print("Please don't specify both -s and -p, ignoring -s!", file=sys.stderr)
		scale = None

	media_spec = resolve_spec(args.media_spec, DEFAULT_MEDIA, "media", verbose)
	media = resolve_media(media_spec, verbose)

	if scale is None and not poster_spec:
		poster_spec = media_spec
		if verbose:
			print(f"Defaulting poster size to media size of {media_spec}", file=sys.stderr)

	cut_margin_spec = resolve_spec(args.cut_margin_spec, DEFAULT_CUT_MARGIN, "cutmargin", verbose)
	cut_margin = pst.boxspec.parse_margin(cut_margin_spec, media, verbose)
	white_margin_spec = resolve_spec(args.white_margin_spec, DEFAULT_WHITE_MARGIN, "whitemargin", verbose)
	white_margin = pst.boxspec.parse_margin(white_margin_spec, media, verbose)

	language = resolve_spec(args.language, DEFAULT_LANGUAGE, "language", verbose)
	lang_dir = pathlib.Path(args.lang_dir) if args.lang_dir else None
	translator = pst.lang.load_translations(language, lang_dir, verbose)

	with source.open() as stream:
		scan_result = pst.dsc_scan.scan(stream, verbose)
	image = resolve_image(scan_result, args.image_spec, verbose)

	poster = None
	if poster_spec:
		poster = pst.boxspec.parse_box(poster_spec, verbose=verbose)

	plan = pst.layout.plan_layout(
		image,
		media,
		cut_margin,
		white_margin,
		scale=scale,
		poster=poster,
		max_sheets=args.max_sheets,
		verbose=verbose,
	)
	if verbose > 1:
		print(
			"   Output image is: [{:g},{:g},{:g},{:g}]".format(*plan.poster.as_tuple()),
			file=sys.stderr,
		)

	config = RunConfig(
		input_name=source.name,
		media_name=media_spec,
		media=media,
		image=image,
		cut_margin=cut_margin,
		white_margin=white_margin,
		scale=scale,
		poster=poster,
		manual_feed=args.manual_feed,
		alignment=args.alignment,
		title=args.title,
		handle=args.handle,
		verbose=verbose,
		lookup=translator.lookup,
	)
	return config, plan, scan_result.passthrough


#============================================
def run_pipeline(args: argparse.Namespace) -> pst.compose.ComposeResult:
	"""
	Run the full pipeline from PostScript input to tiled poster output.

	Args:
		args: Parsed argparse namespace.

	Returns:
		ComposeResult.
	"""
	start_time = time.perf_counter()
	source = open_source(args.input)
	config, plan, passthrough = build_run_config(args, source)

	if args.output_path:
		output_path = pathlib.Path(args.output_path)
		try:
			handle = output_path.open("wb")
		except OSError as error:
			raise TilerError(f"Cannot open '{output_path}' for writing! ({error})") from error
		if args.verbose:
			print(f"Opened '{output_path}' for writing", file=sys.stderr)
		with handle:
			result = pst.compose.compose(config, plan, source, passthrough, handle)
	else:
		out = sys.stdout.buffer
		result = pst.compose.compose(config, plan, source, passthrough, out)
		out.flush()

	if args.manifest_path:
		pst.compose.write_manifest(pathlib.Path(args.manifest_path), config, plan, result)
		if args.verbose:
			print(f"Manifest written: {args.manifest_path}", file=sys.stderr)

	if args.verbose:
		total_time = time.perf_counter() - start_time
		print(f"Pages written: {result.pages}", file=sys.stderr)
		print(f"Timing: total={total_time:.2f}s", file=sys.stderr)
	return result


#============================================
def main(argv: list[str] | None = None) -> None:
	"""
	Main entry point.
	"""
	args = parse_args(argv)
	try:
		run_pipeline(args)
	except (TilerError, OSError) as error:
		print(f"Error: {error}", file=sys.stderr)
		sys.exit(1)
