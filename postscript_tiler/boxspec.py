"""
Textual box, unit and margin specifications.
"""

# Standard Library
import dataclasses
import math
import re
import sys

# PIP3 modules
import reportlab.lib.units

# local repo modules
import postscript_tiler as pst
import postscript_tiler.config


Box = pst.config.Box
Margin = pst.config.Margin
BoxSpecError = pst.config.BoxSpecError
UnknownUnitError = pst.config.UnknownUnitError
AmbiguousUnitError = pst.config.AmbiguousUnitError
NegativeSizeError = pst.config.NegativeSizeError
MarginRangeError = pst.config.MarginRangeError

NUMBER_PATTERN = r"[-+]?(?:\d+\.?\d*|\.\d+)(?:[eE][-+]?\d+)?"
MULTIPLIER_RE = re.compile(rf"({NUMBER_PATTERN})[x*]({NUMBER_PATTERN})")
OFFSET_RE = re.compile(rf"\+({NUMBER_PATTERN}),({NUMBER_PATTERN})")
NUMBER_RE = re.compile(NUMBER_PATTERN)
UNITS_PER_LINE = 7


@dataclasses.dataclass(frozen=True)
class UnitTableEntry:
	name: str
	x_scale: float
	y_scale: float


# media sizes in PostScript points, then plain linear units as fall-back
UNIT_TABLE: tuple[UnitTableEntry, ...] = (
	UnitTableEntry("Letter", 612.0, 792.0),
	UnitTableEntry("Legal", 612.0, 1008.0),
	UnitTableEntry("Tabloid", 792.0, 1224.0),
	UnitTableEntry("Ledger", 792.0, 1224.0),
	UnitTableEntry("Executive", 540.0, 720.0),
	UnitTableEntry("Monarch", 279.0, 540.0),
	UnitTableEntry("Statement", 396.0, 612.0),
	UnitTableEntry("Folio", 612.0, 936.0),
	UnitTableEntry("Quarto", 610.0, 780.0),
	UnitTableEntry("C5", 459.0, 649.0),
	UnitTableEntry("B4", 729.0, 1032.0),
	UnitTableEntry("B5", 516.0, 729.0),
	UnitTableEntry("Dl", 312.0, 624.0),
	UnitTableEntry("A0", 2380.0, 3368.0),
	UnitTableEntry("A1", 1684.0, 2380.0),
	UnitTableEntry("A2", 1190.0, 1684.0),
	UnitTableEntry("A3", 842.0, 1190.0),
	UnitTableEntry("A4", 595.0, 842.0),
	UnitTableEntry("A5", 420.0, 595.0),
	UnitTableEntry("A6", 297.0, 421.0),
	UnitTableEntry("p", 1.0, 1.0),
	UnitTableEntry("i", reportlab.lib.units.inch, reportlab.lib.units.inch),
	UnitTableEntry("ft", 12.0 * reportlab.lib.units.inch, 12.0 * reportlab.lib.units.inch),
	UnitTableEntry("mm", reportlab.lib.units.mm, reportlab.lib.units.mm),
	UnitTableEntry("cm", reportlab.lib.units.cm, reportlab.lib.units.cm),
	UnitTableEntry("m", 1000.0 * reportlab.lib.units.mm, 1000.0 * reportlab.lib.units.mm),
)


#============================================
def describe_box_grammar(spec: str, unit_table: tuple[UnitTableEntry, ...]) -> str:
	"""
	Build the help text shown for a box spec that cannot be parsed.

	Args:
		spec: Offending box spec.
		unit_table: Unit table used for the lookup.

	Returns:
		Multi-line message.
	"""
	lines = [
		f"I don't understand your box specification '{spec}'!",
		"The proper format is: ([text] meaning optional text)",
		"  [multiplier][offset]unit",
		"  with multiplier:  numberxnumber",
		"  with offset:      +number,number",
		"  with unit one of:",
	]
	names = [entry.name for entry in unit_table]
	for start in range(0, len(names), UNITS_PER_LINE):
		chunk = names[start:start + UNITS_PER_LINE]
		lines.append("   " + " ".join(f"{name:<10}" for name in chunk).rstrip())
	lines.append("You can use a shorthand for these unit names, provided it resolves unique.")
	return "\n".join(lines)


#============================================
def find_unit(name: str, unit_table: tuple[UnitTableEntry, ...] = UNIT_TABLE) -> UnitTableEntry:
	"""
	Resolve a unit name by case-insensitive unique prefix.

	An exact full-length match wins even when the name is also a prefix
	of other entries.

	Args:
		name: Unit name or abbreviation.
		unit_table: Ordered unit table.

	Returns:
		Matching UnitTableEntry.
	"""
	if not name:
		raise UnknownUnitError(describe_box_grammar(name, unit_table))
	wanted = name.lower()
	matches: list[UnitTableEntry] = []
	for entry in unit_table:
		entry_name = entry.name.lower()
		if not entry_name.startswith(wanted):
			continue
		if entry_name == wanted:
			return entry
		matches.append(entry)
	if not matches:
		raise UnknownUnitError(describe_box_grammar(name, unit_table))
	if len(matches) > 1:
		candidates = ", ".join(entry.name for entry in matches)
		raise AmbiguousUnitError(
			f"Your box spec '{name}' is not unique! (give more chars, matches: {candidates})"
		)
	return matches[0]


#============================================
def parse_box(
	spec: str,
	unit_table: tuple[UnitTableEntry, ...] = UNIT_TABLE,
	verbose: int = 0,
) -> Box:
	"""
	Convert a textual box spec like '3x3A4' or '200x200+10,10p' into points.

	Args:
		spec: Box spec `[multiplier][offset]unit`.
		unit_table: Ordered unit table.
		verbose: Verbosity level, conversions print at level 2.

	Returns:
		Box in PostScript points.
	"""
	mult_x, mult_y = 1.0, 1.0
	off_x, off_y = 0.0, 0.0
	rest = spec

	if rest[:1].isdigit():
		match = MULTIPLIER_RE.match(rest)
		if match is None:
			raise BoxSpecError(describe_box_grammar(spec, unit_table))
		mult_x, mult_y = float(match.group(1)), float(match.group(2))
		rest = rest[match.end():]

	match = OFFSET_RE.match(rest)
	if match is not None:
		off_x, off_y = float(match.group(1)), float(match.group(2))
		rest = rest[match.end():]

	unit = find_unit(rest, unit_table)
	# the multiplier is the extent of the box, measured from its offset
	box = Box(
		off_x * unit.x_scale,
		off_y * unit.y_scale,
		(off_x + mult_x) * unit.x_scale,
		(off_y + mult_y) * unit.y_scale,
	)

	if verbose > 1:
		print(
			f"   Box_convert: '{spec}' into [{box.left:g},{box.bottom:g},{box.right:g},{box.top:g}]",
			file=sys.stderr,
		)

	if not all(math.isfinite(value) for value in box.as_tuple()):
		raise BoxSpecError(f"Your specification '{spec}' leads to a size that is not finite!")
	if box.left < 0.0 or box.bottom < 0.0 or box.right < box.left or box.top < box.bottom:
		raise NegativeSizeError(f"Your specification '{spec}' leads to negative values!")
	return box


#============================================
def parse_margin(spec: str, media: Box, verbose: int = 0) -> Margin:
	"""
	Convert a margin spec into a horizontal and vertical margin.

	Args:
		spec: '0', a percentage like '5%', or a box spec.
		media: Media box the margin applies to.
		verbose: Verbosity level passed to the box parser.

	Returns:
		Margin in points.
	"""
	text = spec.strip()
	zero_match = NUMBER_RE.fullmatch(text)
	if zero_match is not None and float(text) == 0.0:
		# no unit needed for a zero margin
		return Margin(0.0, 0.0)

	if text.endswith("%"):
		match = NUMBER_RE.match(text)
		if match is None:
			raise BoxSpecError(f"Illegal margin specification '{spec}'!")
		percent = float(match.group(0))
		margin = Margin(0.01 * percent * media.width, 0.01 * percent * media.height)
	else:
		box = parse_box(text, verbose=verbose)
		margin = Margin(box.width, box.height)

	for value, media_size in ((margin.x, media.width), (margin.y, media.height)):
		if value < 0.0 or 2.0 * value >= media_size:
			raise MarginRangeError(f"Margin value '{spec}' out of range!")
	return margin
