"""Tests for the command line interface."""

import json
import tempfile
import shutil
from pathlib import Path

from click.testing import CliRunner

from workroom.cli.main import cli
from workroom.core.templates import APP_FILE_NAME


class TestCli:
    """Test the CLI commands against a temporary projects folder."""

    def setup_method(self):
        self.temp_dir = Path(tempfile.mkdtemp())
        self.projects_dir = self.temp_dir / "projects"
        self.projects_dir.mkdir()
        templates_dir = self.temp_dir / "templates" / "blender"
        templates_dir.mkdir(parents=True)
        (templates_dir / APP_FILE_NAME).write_text("name: Blender\nextension: blend\n")
        (templates_dir / "template.blend").write_bytes(b"blend")

        self.config_file = self.temp_dir / "config.ini"
        self.config_file.write_text(
            "[paths]\n"
            f"projects_dir = {self.projects_dir}\n"
            f"templates_dir = {self.temp_dir / 'templates'}\n"
            f"clients_file = {self.temp_dir / 'clients.yaml'}\n"
            "[logging]\n"
            "file_enabled = false\n"
            "console_enabled = false\n"
        )
        self.runner = CliRunner()

    def teardown_method(self):
        if self.temp_dir.exists():
            shutil.rmtree(self.temp_dir)

    def invoke(self, *args):
        return self.runner.invoke(cli, ["--config", str(self.config_file)] + list(args))

    def test_help(self):
        result = self.runner.invoke(cli, ["--help"])
        assert result.exit_code == 0
        assert "version-up" in result.output

    def test_projects_empty(self):
        result = self.invoke("projects")
        assert result.exit_code == 0
        assert "No projects found" in result.output

    def test_create_and_list_projects(self):
        result = self.invoke("create-project", "Big Film")
        assert result.exit_code == 0, result.output
        assert (self.projects_dir / "bigfilm" / "project.yaml").is_file()

        result = self.invoke("projects", "--format", "json")
        assert result.exit_code == 0
        data = json.loads(result.output)
        assert [p["name"] for p in data] == ["Big Film"]

    def test_create_existing_project_fails(self):
        self.invoke("create-project", "Show")
        result = self.invoke("create-project", "Show")
        assert result.exit_code != 0
        assert "Already Exists" in result.output

    def test_client_prefix(self):
        assert self.invoke("client", "add", "Acme Corp", "acme").exit_code == 0
        result = self.invoke("create-project", "Spot", "--client", "acme")
        assert result.exit_code == 0, result.output
        assert (self.projects_dir / "acme_spot").is_dir()

    def test_unknown_client(self):
        result = self.invoke("create-project", "Spot", "--client", "nobody")
        assert result.exit_code != 0
        assert not (self.projects_dir / "spot").exists()

    def test_task_workflow(self):
        assert self.invoke("create-project", "Show").exit_code == 0
        assert self.invoke("new-group", "show", "shots").exit_code == 0
        result = self.invoke("new-task", "show", "sh010", "--parent", "shots")
        assert result.exit_code == 0, result.output

        result = self.invoke("tree", "show", "--format", "json")
        assert result.exit_code == 0
        tree = json.loads(result.output)
        assert tree["children"][0]["name"] == "shots"
        assert tree["children"][0]["children"][0]["is_task"] is True

        result = self.invoke("new-file", "show", "shots/sh010", "--dcc", "Blender", "--name", "layout")
        assert result.exit_code == 0, result.output
        work_dir = self.projects_dir / "show" / "02_work" / "shots" / "sh010" / "01_work"
        created = work_dir / "show_sh010_layout_v001.blend"
        assert created.read_bytes() == b"blend"

        result = self.invoke("version-up", str(created))
        assert result.exit_code == 0, result.output
        assert (work_dir / "show_sh010_layout_v002.blend").is_file()

        result = self.invoke("files", "show", "shots/sh010", "--format", "json")
        assert result.exit_code == 0
        assert [f["version"] for f in json.loads(result.output)] == [2, 1]

    def test_version_up_collision(self):
        work_dir = self.temp_dir / "loose"
        work_dir.mkdir()
        (work_dir / "a_v001.nk").write_bytes(b"one")
        (work_dir / "a_v002.nk").write_bytes(b"two")

        result = self.invoke("version-up", str(work_dir / "a_v001.nk"))
        assert result.exit_code != 0
        assert (work_dir / "a_v002.nk").read_bytes() == b"two"

    def test_version_up_unversioned(self):
        path = self.temp_dir / "notes.txt"
        path.write_text("notes")
        result = self.invoke("version-up", str(path))
        assert result.exit_code != 0
        assert "Parse Error" in result.output

    def test_dccs(self):
        result = self.invoke("dccs")
        assert result.exit_code == 0
        assert "Blender" in result.output

    def test_client_commands(self):
        assert self.invoke("client", "add", "Acme Corp", "acme").exit_code == 0
        result = self.invoke("client", "list")
        assert "Acme Corp" in result.output

        assert self.invoke("client", "add", "Acme Corp", "acme").exit_code != 0
        assert self.invoke("client", "remove", "Acme Corp").exit_code == 0
        assert "No clients registered" in self.invoke("client", "list").output

    def test_config_set_and_show(self):
        result = self.invoke("config", "set", "files.exclusive_create", "true")
        assert result.exit_code == 0
        assert "exclusive_create = True" in self.config_file.read_text()

        result = self.invoke("config", "show")
        assert result.exit_code == 0
        assert "exclusive_create: True" in result.output

    def test_config_set_unknown_key(self):
        result = self.invoke("config", "set", "files.nothing", "1")
        assert result.exit_code != 0
