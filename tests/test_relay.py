# Standard Library
import io
import pathlib

# PIP3 modules
import pytest

# local repo modules
import postscript_tiler as pst
import postscript_tiler.config
import postscript_tiler.source


#============================================
def relay_bytes(data: bytes) -> tuple[bytes, bool]:
	out = io.BytesIO()
	found_eot = pst.source.relay(io.BytesIO(data), out)
	return out.getvalue(), found_eot


#============================================
def test_comment_lines_are_dropped() -> None:
	data = b"%!PS\n%%BoundingBox: 0 0 1 1\nnewpath\n  % indented stays\nshowpage\n"
	output, found_eot = relay_bytes(data)
	assert output == b"newpath\n  % indented stays\nshowpage\n"
	assert found_eot is False


#============================================
def test_trailing_control_d_is_removed() -> None:
	output, found_eot = relay_bytes(b"newpath\nshowpage\n\x04")
	assert output == b"newpath\nshowpage\n"
	assert found_eot is True


#============================================
def test_control_d_on_last_code_line_cuts_it() -> None:
	output, found_eot = relay_bytes(b"newpath\nshowpage\x04junk")
	assert output == b"newpath\nshowpage"
	assert found_eot is True


#============================================
def test_control_d_before_last_line_is_content() -> None:
	output, found_eot = relay_bytes(b"(\x04) pop\nshowpage\n")
	assert output == b"(\x04) pop\nshowpage\n"
	assert found_eot is False


#============================================
def test_long_lines_are_copied_whole() -> None:
	line = b"0 " * 3000 + b"pop\n"
	output, _found_eot = relay_bytes(line + b"showpage\n")
	assert output == line + b"showpage\n"


#============================================
def test_empty_content() -> None:
	assert relay_bytes(b"") == (b"", False)


#============================================
def test_memory_source_rewinds() -> None:
	source = pst.source.ContentSource.from_bytes(b"line one\nline two\n")
	for _ in range(3):
		with source.open() as stream:
			assert stream.read() == b"line one\nline two\n"


#============================================
def test_stream_source_is_buffered_once() -> None:
	pipe = io.BytesIO(b"showpage\n")
	source = pst.source.ContentSource.from_stream(pipe)
	assert source.name == "-"
	with source.open() as stream:
		assert stream.read() == b"showpage\n"
	with source.open() as stream:
		assert stream.read() == b"showpage\n"


#============================================
def test_path_source_reopens_file(tmp_path: pathlib.Path) -> None:
	path = tmp_path / "pattern.ps"
	path.write_bytes(b"showpage\n")
	source = pst.source.ContentSource.from_path(path)
	with source.open() as stream:
		first = stream.read()
	with source.open() as stream:
		second = stream.read()
	assert first == second == b"showpage\n"


#============================================
def test_missing_file_raises(tmp_path: pathlib.Path) -> None:
	with pytest.raises(pst.config.ContentSourceError):
		pst.source.ContentSource.from_path(tmp_path / "missing.ps")


#============================================
def test_vanished_file_raises_on_open(tmp_path: pathlib.Path) -> None:
	path = tmp_path / "pattern.ps"
	path.write_bytes(b"showpage\n")
	source = pst.source.ContentSource.from_path(path)
	path.unlink()
	with pytest.raises(pst.config.ContentSourceError):
		with source.open():
			pass


#============================================
def test_control_d_before_trailing_blank_lines() -> None:
	output, found_eot = relay_bytes(b"newpath\nshowpage\n\x04\n\n")
	assert output == b"newpath\nshowpage\n"
	assert found_eot is True


#============================================
def test_blank_lines_kept_without_control_d() -> None:
	output, found_eot = relay_bytes(b"\nnewpath\n\nshowpage\n\n")
	assert output == b"\nnewpath\n\nshowpage\n\n"
	assert found_eot is False


#============================================
class UnreadableStream(io.BytesIO):
	"""
	Stream that fails after its first line.
	"""

	def __iter__(self):
		yield b"newpath\n"
		raise OSError("device went away")


#============================================
def test_read_failure_is_content_error() -> None:
	out = io.BytesIO()
	with pytest.raises(pst.config.ContentSourceError):
		pst.source.relay(UnreadableStream(), out)


#============================================
class FullSink(io.BytesIO):
	"""
	Output sink that refuses every write.
	"""

	def write(self, data: bytes) -> int:
		raise OSError("No space left on device")


#============================================
def test_write_failure_is_not_content_error() -> None:
	with pytest.raises(OSError):
		pst.source.relay(io.BytesIO(b"newpath\nshowpage\n"), FullSink())
