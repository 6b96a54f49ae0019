"""
Rewindable access to the original PostScript content and the relay that
copies it into every page of the poster.
"""

# Standard Library
import contextlib
import io
import pathlib
import typing

# local repo modules
import postscript_tiler as pst
import postscript_tiler.config


ContentSourceError = pst.config.ContentSourceError
END_OF_TRANSMISSION = pst.config.END_OF_TRANSMISSION

STDIN_NAME = "-"


#============================================
class ContentSource:
	"""
	Content that can be read from the start any number of times.

	A file path is reopened for every pass. A non-seekable stream such as
	a pipe is buffered in memory once, on construction.
	"""

	def __init__(self, name: str, path: pathlib.Path | None = None, data: bytes | None = None):
		if (path is None) == (data is None):
			raise ValueError("give exactly one of path and data")
		self.name = name
		self._path = path
		self._data = data

	@classmethod
	def from_path(cls, path: pathlib.Path) -> "ContentSource":
		if not path.is_file():
			raise ContentSourceError(f"fail to open file '{path}'!")
		return cls(str(path), path=path)

	@classmethod
	def from_stream(cls, stream: typing.BinaryIO, name: str = STDIN_NAME) -> "ContentSource":
		return cls(name, data=stream.read())

	@classmethod
	def from_bytes(cls, data: bytes, name: str = "<memory>") -> "ContentSource":
		return cls(name, data=data)

	@contextlib.contextmanager
	def open(self) -> typing.Iterator[typing.BinaryIO]:
		"""
		Open a fresh binary stream positioned at the start of the content.

		Yields:
			Binary stream.
		"""
		if self._data is not None:
			yield io.BytesIO(self._data)
			return
		try:
			handle = self._path.open("rb")
		except OSError as error:
			raise ContentSourceError(f"fail to open file '{self._path}'!") from error
		with handle:
			yield handle


#============================================
def read_lines(stream: typing.BinaryIO) -> typing.Iterator[bytes]:
	"""
	Yield the lines of a content stream, reporting read failures as
	ContentSourceError so they stay apart from output errors.
	"""
	try:
		yield from stream
	except OSError as error:
		raise ContentSourceError(f"cannot read content: {error}") from error


#============================================
def write_line(line: bytes, out: typing.BinaryIO) -> None:
	if line and not line.startswith(b"%"):
		out.write(line)


#============================================
def relay(stream: typing.BinaryIO, out: typing.BinaryIO) -> bool:
	"""
	Copy PostScript content to the output, leaving out comment lines.

	DSC comment lines of the embedded file would confuse previewers, so
	every line starting with '%' is dropped. A control-D in the last
	non-blank line ends the content there; neither the byte nor any blank
	lines after it are copied.

	Args:
		stream: Content stream positioned at its start.
		out: Binary output sink.

	Returns:
		True if a trailing control-D was removed.
	"""
	held: bytes | None = None
	blanks: list[bytes] = []
	for line in read_lines(stream):
		if not line.strip():
			blanks.append(line)
			continue
		if held is not None:
			write_line(held, out)
		for blank in blanks:
			out.write(blank)
		held = line
		blanks = []

	if held is None:
		for blank in blanks:
			out.write(blank)
		return False

	eot_index = held.find(END_OF_TRANSMISSION)
	if eot_index < 0:
		write_line(held, out)
		for blank in blanks:
			out.write(blank)
		return False
	write_line(held[:eot_index], out)
	return True
