# Standard Library
import io
import json
import pathlib
import sys

# PIP3 modules
import pytest

# local repo modules
import conftest
import postscript_tiler as pst
import postscript_tiler.cli


#============================================
def write_input(tmp_path: pathlib.Path, data: bytes | None = None) -> pathlib.Path:
	path = tmp_path / "pattern.ps"
	if data is None:
		data = conftest.build_document()
	path.write_bytes(data)
	return path


#============================================
def run_main(argv: list[str]) -> None:
	pst.cli.main(argv)


#============================================
def test_tiles_file_to_output(tmp_path: pathlib.Path) -> None:
	input_path = write_input(tmp_path)
	output_path = tmp_path / "poster.ps"
	run_main(["-s", "2", "-c", "0", "-o", str(output_path), str(input_path)])
	output = output_path.read_bytes()
	assert output.startswith(b"%!PS-Adobe-3.0\n")
	assert b"%%Pages: 5\n" in output
	assert output.count(b"\n%%Page: ") == 5


#============================================
def test_poster_defaults_to_media(tmp_path: pathlib.Path) -> None:
	input_path = write_input(tmp_path)
	output_path = tmp_path / "poster.ps"
	run_main(["-o", str(output_path), str(input_path)])
	assert b"%%Pages: 2\n" in output_path.read_bytes()


#============================================
def test_scale_ignored_when_poster_given(tmp_path: pathlib.Path, capsys: pytest.CaptureFixture) -> None:
	input_path = write_input(tmp_path)
	output_path = tmp_path / "poster.ps"
	run_main(["-s", "3", "-p", "A4", "-o", str(output_path), str(input_path)])
	assert "ignoring -s" in capsys.readouterr().err
	assert b"%%Pages: 2\n" in output_path.read_bytes()


#============================================
def test_handle_and_title_on_cover(tmp_path: pathlib.Path) -> None:
	input_path = write_input(tmp_path)
	output_path = tmp_path / "poster.ps"
	run_main(["-t", "Aaron (A-shirt)", "-h", "xyz12", "-o", str(output_path), str(input_path)])
	output = output_path.read_bytes()
	assert b"/patterntitle (Aaron \\(A-shirt\\)) def" in output
	assert b"/patternhandle (xyz12) def" in output


#============================================
def test_language_option(tmp_path: pathlib.Path) -> None:
	input_path = write_input(tmp_path)
	output_path = tmp_path / "poster.ps"
	run_main(["-l", "nl", "-o", str(output_path), str(input_path)])
	assert b"/pageword (Pagina ) def" in output_path.read_bytes()


#============================================
def test_manifest_option(tmp_path: pathlib.Path) -> None:
	input_path = write_input(tmp_path)
	output_path = tmp_path / "poster.ps"
	manifest_path = tmp_path / "poster.json"
	run_main(["-s", "2", "-c", "0", "--manifest", str(manifest_path), "-o", str(output_path), str(input_path)])
	data = json.loads(manifest_path.read_text(encoding="utf-8"))
	assert data["pages"] == 5
	assert data["layout"]["rows"] == 2


#============================================
def test_image_box_option_overrides_file(tmp_path: pathlib.Path) -> None:
	input_path = write_input(tmp_path)
	output_path = tmp_path / "poster.ps"
	manifest_path = tmp_path / "poster.json"
	run_main(["-i", "100x100p", "-s", "1", "--manifest", str(manifest_path), "-o", str(output_path), str(input_path)])
	data = json.loads(manifest_path.read_text(encoding="utf-8"))
	assert data["image"] == [0.0, 0.0, 100.0, 100.0]


#============================================
def test_missing_bounding_box_uses_default_image(tmp_path: pathlib.Path) -> None:
	input_path = write_input(tmp_path, conftest.build_document(bounding_box="(atend)"))
	output_path = tmp_path / "poster.ps"
	manifest_path = tmp_path / "poster.json"
	run_main(["--manifest", str(manifest_path), "-o", str(output_path), str(input_path)])
	data = json.loads(manifest_path.read_text(encoding="utf-8"))
	assert data["image"] == [0.0, 0.0, 595.0, 842.0]


#============================================
def test_stdin_to_stdout(monkeypatch: pytest.MonkeyPatch, capsysbinary: pytest.CaptureFixture) -> None:
	fake_stdin = io.TextIOWrapper(io.BytesIO(conftest.build_document() + b"\x04"))
	monkeypatch.setattr(sys, "stdin", fake_stdin)
	run_main(["-s", "2", "-c", "0", "-"])
	output = capsysbinary.readouterr().out
	assert output.startswith(b"%!PS-Adobe-3.0\n")
	assert b"%%BeginDocument: -\n" in output
	assert output.count(b"\x04") == 1
	assert output.endswith(b"\x04")


#============================================
def test_runs_are_byte_identical(tmp_path: pathlib.Path) -> None:
	input_path = write_input(tmp_path)
	first_path = tmp_path / "first.ps"
	second_path = tmp_path / "second.ps"
	run_main(["-s", "2.5", "-a", "-o", str(first_path), str(input_path)])
	run_main(["-s", "2.5", "-a", "-o", str(second_path), str(input_path)])
	assert first_path.read_bytes() == second_path.read_bytes()


#============================================
@pytest.mark.parametrize(
	"options, message",
	[
		(["-m", "842x595p"], "portrait"),
		(["-m", "5x5p"], "ridiculous"),
		(["-s", "100"], "ridiculous"),
		(["-m", "L"], "not unique"),
		(["-c", "60%"], "out of range"),
		(["-s", "nan"], "Illegal scale"),
		(["-p", "1e400x1p"], "not finite"),
	],
)
def test_bad_options_exit_with_error(
	options: list[str],
	message: str,
	tmp_path: pathlib.Path,
	capsys: pytest.CaptureFixture,
) -> None:
	input_path = write_input(tmp_path)
	output_path = tmp_path / "poster.ps"
	with pytest.raises(SystemExit) as excinfo:
		run_main(options + ["-o", str(output_path), str(input_path)])
	assert excinfo.value.code == 1
	err = capsys.readouterr().err
	assert err.startswith("Error: ")
	assert message in err
	# validation happens before any output is opened
	assert not output_path.exists()


#============================================
def test_missing_input_exits(tmp_path: pathlib.Path, capsys: pytest.CaptureFixture) -> None:
	with pytest.raises(SystemExit) as excinfo:
		run_main([str(tmp_path / "missing.ps")])
	assert excinfo.value.code == 1
	assert "fail to open file" in capsys.readouterr().err


#============================================
def test_help_is_long_option_only(capsys: pytest.CaptureFixture) -> None:
	with pytest.raises(SystemExit) as excinfo:
		run_main(["--help"])
	assert excinfo.value.code == 0
	out = capsys.readouterr().out
	assert "--handle" in out
	assert "5%" in out


#============================================
def test_unterminated_embedded_document_uses_default_image(tmp_path: pathlib.Path) -> None:
	data = conftest.build_document(
		bounding_box="(atend)",
		body=b"%%BeginDocument: inner.eps\nshowpage\n",
		trailer=b"%%BoundingBox: 0 0 50 60\n",
	)
	input_path = write_input(tmp_path, data)
	output_path = tmp_path / "poster.ps"
	manifest_path = tmp_path / "poster.json"
	run_main(["--manifest", str(manifest_path), "-o", str(output_path), str(input_path)])
	data = json.loads(manifest_path.read_text(encoding="utf-8"))
	assert data["image"] == [0.0, 0.0, 595.0, 842.0]
	assert output_path.read_bytes().endswith(b"%%Trailer\n%%EOF\n")
