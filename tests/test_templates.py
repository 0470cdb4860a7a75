"""Tests for template discovery."""

import tempfile
import shutil
from pathlib import Path

import pytest

from workroom.core.exceptions import DescriptorError, PathNotFoundError
from workroom.core.models import Dcc
from workroom.core.templates import APP_FILE_NAME, find_dccs, read_dcc


class TestTemplates:
    """Test reading app.yaml template folders."""

    def setup_method(self):
        self.temp_dir = Path(tempfile.mkdtemp())

    def teardown_method(self):
        if self.temp_dir.exists():
            shutil.rmtree(self.temp_dir)

    def add_template(self, folder: str, name: str, extension: str, with_file: bool = True) -> Path:
        path = self.temp_dir / folder
        path.mkdir()
        (path / APP_FILE_NAME).write_text(f"name: {name}\nextension: '{extension}'\n")
        if with_file:
            (path / f"template.{extension.lstrip('.')}").write_bytes(b"template")
        return path

    def test_read_dcc(self):
        folder = self.add_template("nuke", "Nuke", "nk")

        dcc = read_dcc(folder)
        assert dcc == Dcc(name="Nuke", extension=".nk", template_path=folder / "template.nk")

    def test_extension_with_dot(self):
        folder = self.add_template("blender", "Blender", ".blend")
        assert read_dcc(folder).extension == ".blend"

    def test_missing_template_file(self):
        folder = self.add_template("maya", "Maya", "ma", with_file=False)
        with pytest.raises(DescriptorError):
            read_dcc(folder)

    def test_missing_descriptor(self):
        folder = self.temp_dir / "empty"
        folder.mkdir()
        with pytest.raises(DescriptorError):
            read_dcc(folder)

    def test_invalid_descriptor(self):
        folder = self.temp_dir / "broken"
        folder.mkdir()
        (folder / APP_FILE_NAME).write_text("name: Broken\n")
        with pytest.raises(DescriptorError):
            read_dcc(folder)

    def test_find_dccs_skips_bad_entries(self):
        self.add_template("nuke", "Nuke", "nk")
        self.add_template("blender", "Blender", "blend")
        self.add_template("maya", "Maya", "ma", with_file=False)
        (self.temp_dir / "readme.txt").write_text("templates")

        assert [d.name for d in find_dccs(self.temp_dir)] == ["Blender", "Nuke"]

    def test_find_dccs_missing_root(self):
        with pytest.raises(PathNotFoundError):
            find_dccs(self.temp_dir / "missing")

    def test_dcc_normalizes_extension(self):
        dcc = Dcc(name="Houdini", extension="hip", template_path="template.hip")
        assert dcc.extension == ".hip"
        assert dcc.template_path == Path("template.hip")
