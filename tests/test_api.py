"""Tests for the JSON API."""

import tempfile
import shutil
import threading
import time
from pathlib import Path
from unittest.mock import patch

from workroom.core.config import AppConfig
from workroom.core.templates import APP_FILE_NAME
from workroom.web.app import create_app


class TestApi:
    """Test the API endpoints with the Flask test client."""

    def setup_method(self):
        self.temp_dir = Path(tempfile.mkdtemp())
        self.projects_dir = self.temp_dir / "projects"
        self.projects_dir.mkdir()
        templates_dir = self.temp_dir / "templates" / "nuke"
        templates_dir.mkdir(parents=True)
        (templates_dir / APP_FILE_NAME).write_text("name: Nuke\nextension: nk\n")
        (templates_dir / "template.nk").write_bytes(b"nuke")

        config = AppConfig()
        config.paths.projects_dir = self.projects_dir
        config.paths.templates_dir = self.temp_dir / "templates"
        self.app = create_app(config, {'TESTING': True})
        self.client = self.app.test_client()

    def teardown_method(self):
        if self.temp_dir.exists():
            shutil.rmtree(self.temp_dir)

    def create_task(self):
        self.client.post('/api/projects', json={'name': 'Show'})
        self.client.post('/api/projects/show/tasks', json={'name': 'shots', 'kind': 'group'})
        return self.client.post('/api/projects/show/tasks', json={'name': 'sh010', 'parent': 'shots'})

    def test_list_projects_empty(self):
        response = self.client.get('/api/projects')
        assert response.status_code == 200
        assert response.get_json() == {'projects': [], 'count': 0, 'stale': False}

    def test_create_project(self):
        response = self.client.post('/api/projects', json={'name': 'Big Film'})
        assert response.status_code == 201
        assert response.get_json()['project']['name_sanitized'] == 'bigfilm'

        data = self.client.get('/api/projects?filter=big').get_json()
        assert data['count'] == 1
        assert self.client.get('/api/projects?filter=zzz').get_json()['count'] == 0

    def test_create_project_conflict(self):
        self.client.post('/api/projects', json={'name': 'Show'})
        response = self.client.post('/api/projects', json={'name': 'Show'})
        assert response.status_code == 409

    def test_create_project_without_body(self):
        response = self.client.post('/api/projects')
        assert response.status_code == 400

    def test_stale_project_list(self):
        self.client.post('/api/projects', json={'name': 'Show'})
        shutil.rmtree(self.projects_dir)

        response = self.client.get('/api/projects')
        assert response.status_code == 200
        data = response.get_json()
        assert data['stale'] is True
        assert data['count'] == 1

    def test_missing_projects_dir(self):
        shutil.rmtree(self.projects_dir)
        response = self.client.get('/api/projects')
        assert response.status_code == 404

    def test_task_tree(self):
        response = self.create_task()
        assert response.status_code == 201

        data = self.client.get('/api/projects/show/tasks').get_json()
        shots = data['tree']['children'][0]
        assert shots['name'] == 'shots'
        assert shots['is_task'] is False
        assert shots['children'][0]['path'] == 'shots/sh010'
        assert shots['children'][0]['is_task'] is True

    def test_unknown_project(self):
        response = self.client.get('/api/projects/nothing/tasks')
        assert response.status_code == 404

    def test_invalid_kind(self):
        self.client.post('/api/projects', json={'name': 'Show'})
        response = self.client.post('/api/projects/show/tasks', json={'name': 'x', 'kind': 'shot'})
        assert response.status_code == 400

    def test_files_workflow(self):
        self.create_task()

        response = self.client.post('/api/projects/show/files', json={'task': 'shots/sh010', 'dcc': 'Nuke'})
        assert response.status_code == 201
        created = response.get_json()['created']
        assert created.endswith('show_sh010_v001.nk')

        response = self.client.post('/api/files/version-up', json={'path': created})
        assert response.status_code == 201
        assert response.get_json()['file']['label'] == 'v002'

        response = self.client.post('/api/files/version-up', json={'path': created})
        assert response.status_code == 409

        data = self.client.get('/api/projects/show/files?task=shots/sh010').get_json()
        assert [f['version'] for f in data['files']] == [2, 1]

    def test_files_need_task(self):
        self.create_task()
        assert self.client.get('/api/projects/show/files').status_code == 400
        assert self.client.get('/api/projects/show/files?task=shots').status_code == 400
        assert self.client.get('/api/projects/show/files?task=nothing').status_code == 404

    def test_version_up_unversioned(self):
        response = self.client.post('/api/files/version-up', json={'path': '/tmp/notes.txt'})
        assert response.status_code == 400

    def test_dccs(self):
        data = self.client.get('/api/dccs').get_json()
        assert data['count'] == 1
        assert data['dccs'][0]['extension'] == '.nk'

    def test_unknown_endpoint(self):
        assert self.client.get('/api/nothing').status_code == 404
        assert self.client.delete('/api/dccs').status_code == 405

    def test_version_up_relative_path(self):
        self.create_task()
        response = self.client.post('/api/projects/show/files', json={'task': 'shots/sh010', 'dcc': 'Nuke'})
        created = Path(response.get_json()['created'])

        response = self.client.post('/api/files/version-up', json={'path': created.name})
        assert response.status_code == 400
        assert not (created.parent / 'show_sh010_v002.nk').exists()

    def test_routes_hold_workspace_lock(self):
        self.create_task()
        workspace = self.app.extensions['workroom']
        lock = self.app.extensions['workroom_lock']
        held = []
        select_task = workspace.select_task
        create_file = workspace.create_file

        def record_select(*args, **kwargs):
            held.append(lock.locked())
            return select_task(*args, **kwargs)

        def record_create(*args, **kwargs):
            held.append(lock.locked())
            return create_file(*args, **kwargs)

        with patch.object(workspace, 'select_task', side_effect=record_select), \
                patch.object(workspace, 'create_file', side_effect=record_create):
            response = self.client.post('/api/projects/show/files', json={'task': 'shots/sh010', 'dcc': 'Nuke'})

        assert response.status_code == 201
        assert held == [True, True]
        assert not lock.locked()

    def test_lock_released_after_error(self):
        lock = self.app.extensions['workroom_lock']
        assert self.client.get('/api/projects/nothing/tasks').status_code == 404
        assert not lock.locked()
        assert self.client.get('/api/projects').status_code == 200

    def test_concurrent_file_creation_stays_in_its_project(self):
        for project in ('alpha', 'beta'):
            self.client.post('/api/projects', json={'name': project})
            self.client.post(f'/api/projects/{project}/tasks', json={'name': 'comp'})

        workspace = self.app.extensions['workroom']
        select_task = workspace.select_task

        def slow_select(*args, **kwargs):
            files = select_task(*args, **kwargs)
            time.sleep(0.05)
            return files

        statuses = {}

        def post(project):
            client = self.app.test_client()
            response = client.post(f'/api/projects/{project}/files', json={'task': 'comp', 'dcc': 'Nuke'})
            statuses[project] = response.status_code

        with patch.object(workspace, 'select_task', side_effect=slow_select):
            threads = [threading.Thread(target=post, args=(p,)) for p in ('alpha', 'beta')]
            for thread in threads:
                thread.start()
            for thread in threads:
                thread.join()

        assert statuses == {'alpha': 201, 'beta': 201}
        for project in ('alpha', 'beta'):
            work_dir = self.projects_dir / project / '02_work' / 'comp' / '01_work'
            assert [p.name for p in work_dir.iterdir()] == [f'{project}_comp_v001.nk']
