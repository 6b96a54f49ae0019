"""
Translations of the fixed page-label prompts.

Language files are named tile.<code>.yml and hold a YAML mapping from
the English prompt to its translation.
"""

# Standard Library
import pathlib
import sys

# PIP3 modules
import yaml

# local repo modules
import postscript_tiler as pst
import postscript_tiler.config


DEFAULT_LANGUAGE = pst.config.DEFAULT_LANGUAGE
LANG_DIR = pathlib.Path(__file__).parent / "lang"

PROMPT_PAGE = "Page"
PROMPT_ROW = "row"
PROMPT_COLUMN = "column"
PROMPT_COVER = "cover page"
PROMPT_TAGLINE = "an open source platform for made-to-measure sewing patterns"
PROMPTS = (PROMPT_PAGE, PROMPT_ROW, PROMPT_COLUMN, PROMPT_COVER, PROMPT_TAGLINE)


#============================================
class Translator:
	"""
	Prompt lookup with fall-back to the built-in English text.
	"""

	def __init__(self, language: str = DEFAULT_LANGUAGE, table: dict[str, str] | None = None):
		self.language = language
		self.table = dict(table or {})

	def lookup(self, key: str) -> str:
		value = self.table.get(key)
		if not value:
			return key
		return value


#============================================
def language_file(code: str, lang_dir: pathlib.Path | None = None) -> pathlib.Path:
	"""
	Path of the language file for a two-letter code.
	"""
	if lang_dir is None:
		lang_dir = LANG_DIR
	return lang_dir / f"tile.{code}.yml"


#============================================
def read_table(path: pathlib.Path) -> dict[str, str]:
	"""
	Read a language file into a prompt table.

	Args:
		path: YAML language file.

	Returns:
		Mapping of prompt to translation.
	"""
	with path.open("r", encoding="utf-8") as handle:
		data = yaml.safe_load(handle)
	if not isinstance(data, dict):
		raise ValueError(f"Error in language file {path}: expected a mapping")
	table: dict[str, str] = {}
	for key, value in data.items():
		if not isinstance(key, str) or not isinstance(value, str):
			raise ValueError(f"Error in language file {path}: entry {key!r} is not text")
		table[key] = value
	return table


#============================================
def load_translations(
	code: str,
	lang_dir: pathlib.Path | None = None,
	verbose: int = 0,
) -> Translator:
	"""
	Load the translations for a language, never failing the run.

	An invalid code, a missing file or a broken file all print a warning
	and give a Translator that returns the built-in prompts.

	Args:
		code: Two-letter language code.
		lang_dir: Directory holding tile.<code>.yml files.
		verbose: Verbosity level.

	Returns:
		Translator.
	"""
	if len(code) != 2 or not code.isalpha():
		print(f"Invalid language code '{code}'", file=sys.stderr)
		return Translator()

	path = language_file(code.lower(), lang_dir)
	try:
		table = read_table(path)
	except (OSError, ValueError, yaml.YAMLError) as error:
		print(
			f"Error reading language file for '{code}'. Using default language of "
			f"'{DEFAULT_LANGUAGE}' ({error})",
			file=sys.stderr,
		)
		return Translator()

	if verbose:
		print(f"Using language file {path}", file=sys.stderr)
	return Translator(code.lower(), table)
