from __future__ import annotations

import json

import pytest

from codepack.exceptions import LanguageMapError
from codepack.language import LanguageMapper


def test_defaults():
    mapper = LanguageMapper.load()
    assert mapper.language_for("src/main.py") == "python"
    assert mapper.language_for("app/View.TSX") == "tsx"
    assert mapper.language_for("Makefile") == ""
    assert mapper.language_for("archive.unknownext") == ""


def test_first_name_is_authoritative():
    mapper = LanguageMapper({".scss": ["scss", "css"]})
    assert mapper.language_for("a.scss") == "scss"


def test_empty_entry_is_unmapped():
    assert LanguageMapper({".x": []}).language_for("a.x") == ""


def test_custom_table_replaces_entries(tmp_path):
    custom = tmp_path / "langs.json"
    custom.write_text(json.dumps({".py": ["py3"], ".FOO": ["foo"]}))

    mapper = LanguageMapper.load(custom)

    assert mapper.language_for("x.py") == "py3"
    assert mapper.language_for("x.foo") == "foo"
    assert mapper.language_for("x.go") == "go"


@pytest.mark.parametrize(
    "content",
    ["{not json", "[\".py\"]", "{\".py\": \"python\"}", "{\".py\": [1]}"],
)
def test_malformed_custom_table(tmp_path, content):
    custom = tmp_path / "langs.json"
    custom.write_text(content)
    with pytest.raises(LanguageMapError):
        LanguageMapper.load(custom)


def test_missing_custom_table(tmp_path):
    with pytest.raises(LanguageMapError):
        LanguageMapper.load(tmp_path / "missing.json")


def test_dotfile_is_its_own_extension(tmp_path):
    custom = tmp_path / "langs.json"
    custom.write_text(json.dumps({".bashrc": ["shell"]}))

    mapper = LanguageMapper.load(custom)

    assert mapper.language_for("home/.bashrc") == "shell"
    assert mapper.language_for("home/.BASHRC") == "shell"
    assert mapper.language_for("archive.tar.gz") == ""
    assert LanguageMapper.load().language_for(".zshrc") == "zsh"
