# Standard Library
import pathlib

# PIP3 modules
import pytest

# local repo modules
import postscript_tiler as pst
import postscript_tiler.lang


#============================================
@pytest.mark.parametrize("code", ["en", "nl", "fr"])
def test_shipped_languages_cover_every_prompt(code: str) -> None:
	table = pst.lang.read_table(pst.lang.language_file(code))
	for prompt in pst.lang.PROMPTS:
		assert table.get(prompt)


#============================================
def test_dutch_translation() -> None:
	translator = pst.lang.load_translations("nl")
	assert translator.language == "nl"
	assert translator.lookup(pst.lang.PROMPT_PAGE) == "Pagina"
	assert translator.lookup(pst.lang.PROMPT_COVER) == "voorblad"


#============================================
def test_code_is_case_insensitive() -> None:
	assert pst.lang.load_translations("FR").lookup(pst.lang.PROMPT_ROW) == "rangée"


#============================================
def test_unknown_key_falls_back_to_key() -> None:
	translator = pst.lang.load_translations("nl")
	assert translator.lookup("poster") == "poster"


#============================================
@pytest.mark.parametrize("code", ["xyz", "1a", ""])
def test_invalid_code_falls_back(code: str, capsys: pytest.CaptureFixture) -> None:
	translator = pst.lang.load_translations(code)
	assert translator.lookup(pst.lang.PROMPT_PAGE) == "Page"
	assert "Invalid language code" in capsys.readouterr().err


#============================================
def test_missing_language_file_falls_back(tmp_path: pathlib.Path, capsys: pytest.CaptureFixture) -> None:
	translator = pst.lang.load_translations("de", tmp_path)
	assert translator.lookup(pst.lang.PROMPT_COLUMN) == "column"
	assert "Using default language" in capsys.readouterr().err


#============================================
@pytest.mark.parametrize("text", ["- Page\n- row\n", "Page: [1, 2]\n", "Page: {unclosed\n"])
def test_broken_language_file_falls_back(text: str, tmp_path: pathlib.Path, capsys: pytest.CaptureFixture) -> None:
	(tmp_path / "tile.xx.yml").write_text(text, encoding="utf-8")
	translator = pst.lang.load_translations("xx", tmp_path)
	assert translator.lookup(pst.lang.PROMPT_PAGE) == "Page"
	assert "Using default language" in capsys.readouterr().err


#============================================
def test_custom_language_directory(tmp_path: pathlib.Path) -> None:
	(tmp_path / "tile.de.yml").write_text('"Page": "Seite"\n"row": "Zeile"\n', encoding="utf-8")
	translator = pst.lang.load_translations("de", tmp_path)
	assert translator.lookup(pst.lang.PROMPT_PAGE) == "Seite"
	assert translator.lookup(pst.lang.PROMPT_COLUMN) == "column"
