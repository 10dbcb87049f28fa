"""
Unit-тесты для TxtFileManager.

ЦКП: Ошибки файловой системы становятся ConversionFileError.
"""

import json

import pytest

from nfe_txt.domain.exceptions import ConversionFileError
from nfe_txt.infrastructure import TxtFileManager


class TestRead:

    def test_read_txt_returns_bytes(self, tmp_path):
        path = tmp_path / "lote.txt"
        path.write_bytes("NOTAFISCAL|1|\nA|4.00|São||\n".encode("latin-1"))

        content = TxtFileManager().read_txt(path)

        assert content == path.read_bytes()

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConversionFileError, match="absent.txt"):
            TxtFileManager().read_txt(tmp_path / "absent.txt")

    def test_get_txt_files_sorted(self, tmp_path):
        for name in ("b.txt", "a.txt", "notas.xml"):
            (tmp_path / name).write_text("x", encoding="utf-8")

        files = TxtFileManager().get_txt_files(tmp_path)

        assert [path.name for path in files] == ["a.txt", "b.txt"]

    def test_get_txt_files_missing_directory(self, tmp_path):
        assert TxtFileManager().get_txt_files(tmp_path / "absent") == []


class TestWrite:

    def test_save_xmls_numbered_from_one(self, tmp_path):
        paths = TxtFileManager().save_xmls([b"<a/>", b"<b/>"], tmp_path / "out", "lote")

        assert [path.name for path in paths] == ["lote_1.xml", "lote_2.xml"]
        assert paths[1].read_bytes() == b"<b/>"

    def test_save_json(self, tmp_path):
        path = TxtFileManager().save_json({"valid": False, "nome": "São Paulo"}, tmp_path / "r" / "report.json")

        assert json.loads(path.read_text(encoding="utf-8")) == {"valid": False, "nome": "São Paulo"}

    def test_save_json_not_serializable(self, tmp_path):
        with pytest.raises(ConversionFileError):
            TxtFileManager().save_json({"xml": b"<NFe/>"}, tmp_path / "report.json")
