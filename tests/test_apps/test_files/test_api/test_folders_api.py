"""Tests for the folder endpoints."""

import json

import pytest
from django.core.files.uploadedfile import SimpleUploadedFile

from server.apps.files.logic.file_operations import upload_file
from server.apps.files.logic.folder_operations import create_folder
from server.apps.files.models import File, Folder, UserQuota

_CONTENT = b'folder test content'


def _text_upload(name):
    return SimpleUploadedFile(name, _CONTENT, content_type='text/plain')


@pytest.fixture
def docs(user):
    """Root folder ``Docs`` with a ``Reports`` subfolder.

    Returns:
        The ``Docs`` folder.
    """
    folder = create_folder(user, 'Docs')
    create_folder(user, 'Reports', folder.id)
    return folder


@pytest.mark.django_db
class TestCreate:
    """Tests for folder creation."""

    def test_create_root_folder(self, auth_client):
        """Test creating a root folder answers 201 with its path."""
        response = auth_client.post('/api/folders', {'name': 'Photos'})
        data = response.json()['data']

        assert response.status_code == 201
        assert data['name'] == 'Photos'
        assert data['path'] == '/Photos'
        assert data['parentId'] is None
        assert data['fileCount'] == 0

    def test_create_from_query_string(self, auth_client, docs):
        """Test parameters may be passed in the query string."""
        response = auth_client.post(
            f'/api/folders?name=2024&parentId={docs.id}',
        )
        data = response.json()['data']

        assert response.status_code == 201
        assert data['path'] == '/Docs/2024'
        assert data['parentName'] == 'Docs'

    def test_create_from_json(self, auth_client, docs):
        """Test parameters may be passed as a JSON body."""
        response = auth_client.post(
            '/api/folders',
            json.dumps({'name': 'Drafts', 'parentId': docs.id}),
            content_type='application/json',
        )

        assert response.status_code == 201
        assert response.json()['data']['parentId'] == docs.id

    def test_create_duplicate(self, auth_client, docs):
        """Test a duplicate sibling name answers 409."""
        response = auth_client.post('/api/folders', {'name': 'Docs'})

        assert response.status_code == 409
        assert response.json()['message'] == (
            "Folder with name 'Docs' already exists"
        )

    def test_create_blank_name(self, auth_client):
        """Test a blank name answers 400."""
        response = auth_client.post('/api/folders', {'name': '   '})

        assert response.status_code == 400

    @pytest.mark.parametrize('name', [5, ['Docs'], {'a': 'b'}])
    def test_create_non_string_name(self, auth_client, name):
        """Test a name of the wrong JSON type answers 400."""
        response = auth_client.post(
            '/api/folders',
            json.dumps({'name': name}),
            content_type='application/json',
        )

        assert response.status_code == 400
        assert response.json()['message'] == 'name must be a string'
        assert not Folder.objects.exists()

    def test_create_under_foreign_parent(self, other_client, docs):
        """Test another user's parent is reported as missing."""
        response = other_client.post(
            '/api/folders',
            {'name': 'Sneaky', 'parentId': docs.id},
        )

        assert response.status_code == 404
        assert response.json()['message'] == 'Parent folder not found'


@pytest.mark.django_db
class TestRead:
    """Tests for listing and reading folders."""

    def test_list_roots(self, auth_client, docs):
        """Test only root folders are listed, with child counts."""
        response = auth_client.get('/api/folders')
        data = response.json()['data']

        assert [item['name'] for item in data] == ['Docs']
        assert data[0]['subfolderCount'] == 1

    def test_folder_contents(self, auth_client, user, docs, mock_s3):
        """Test reading a folder returns its children."""
        upload_file(
            user,
            _text_upload('a.txt'),
            docs.id,
        )

        response = auth_client.get(f'/api/folders/{docs.id}')
        data = response.json()['data']

        assert data['path'] == '/Docs'
        assert [item['name'] for item in data['files']] == ['a.txt']
        assert [item['name'] for item in data['subfolders']] == ['Reports']
        assert data['subfolders'][0]['path'] == '/Docs/Reports'
        assert data['fileCount'] == 1

    def test_foreign_folder(self, other_client, docs):
        """Test another user's folder answers 403."""
        response = other_client.get(f'/api/folders/{docs.id}')

        assert response.status_code == 403

    def test_missing_folder(self, auth_client):
        """Test an unknown folder answers 404."""
        response = auth_client.get('/api/folders/999999')

        assert response.status_code == 404

    def test_subfolders(self, auth_client, docs):
        """Test the direct subfolders are listed."""
        response = auth_client.get(f'/api/folders/{docs.id}/subfolders')

        assert [item['name'] for item in response.json()['data']] == [
            'Reports',
        ]

    def test_breadcrumbs(self, auth_client, docs):
        """Test the trail starts at the root and ends at the folder."""
        reports = Folder.objects.get(name='Reports')

        response = auth_client.get(f'/api/folders/{reports.id}/breadcrumbs')

        assert response.json()['data'] == [
            {'id': None, 'name': 'Home'},
            {'id': docs.id, 'name': 'Docs'},
            {'id': reports.id, 'name': 'Reports'},
        ]


@pytest.mark.django_db
class TestModify:
    """Tests for rename, move and delete."""

    def test_rename(self, auth_client, docs):
        """Test renaming a folder."""
        response = auth_client.put(
            f'/api/folders/{docs.id}/rename?name=Documents',
        )

        assert response.status_code == 200
        assert response.json()['data']['path'] == '/Documents'

    def test_rename_non_string_name(self, auth_client, docs):
        """Test a JSON rename with a number leaves the folder alone."""
        response = auth_client.put(
            f'/api/folders/{docs.id}/rename',
            json.dumps({'name': 42}),
            content_type='application/json',
        )

        assert response.status_code == 400
        docs.refresh_from_db()
        assert docs.name == 'Docs'

    def test_rename_to_sibling_name(self, auth_client, user, docs):
        """Test renaming onto a sibling's name answers 409."""
        create_folder(user, 'Music')

        response = auth_client.put(f'/api/folders/{docs.id}/rename?name=Music')

        assert response.status_code == 409

    def test_move_to_root(self, auth_client, docs):
        """Test moving a subfolder to the root."""
        reports = Folder.objects.get(name='Reports')

        response = auth_client.put(f'/api/folders/{reports.id}/move')

        assert response.status_code == 200
        assert response.json()['data']['parentId'] is None
        assert response.json()['data']['path'] == '/Reports'

    def test_move_into_descendant(self, auth_client, docs):
        """Test moving a folder under its own child answers 400."""
        reports = Folder.objects.get(name='Reports')

        response = auth_client.put(
            f'/api/folders/{docs.id}/move?parentId={reports.id}',
        )

        assert response.status_code == 400
        assert response.json()['message'] == (
            'Cannot move folder into itself or its children'
        )

    def test_delete_subtree(
        self,
        auth_client,
        user,
        docs,
        mock_s3,
        bucket_keys,
        django_capture_on_commit_callbacks,
    ):
        """Test deleting a folder removes its subtree and frees space."""
        reports = Folder.objects.get(name='Reports')
        upload_file(user, _text_upload('a.txt'), docs.id)
        upload_file(user, _text_upload('b.txt'), reports.id)
        kept = upload_file(user, _text_upload('kept.txt'))

        with django_capture_on_commit_callbacks(execute=True):
            response = auth_client.delete(f'/api/folders/{docs.id}')
        data = response.json()['data']

        assert response.status_code == 200
        assert data == {
            'deletedFolders': 2,
            'deletedFiles': 2,
            'freedStorage': 2 * len(_CONTENT),
        }
        assert not Folder.objects.filter(user=user).exists()
        assert list(File.objects.filter(user=user)) == [kept]
        assert bucket_keys() == [kept.stored_name]
        quota = UserQuota.objects.get(user=user)
        assert quota.used_bytes == len(_CONTENT)

    def test_delete_foreign(self, other_client, docs):
        """Test deleting another user's folder is forbidden."""
        response = other_client.delete(f'/api/folders/{docs.id}')

        assert response.status_code == 403
        assert Folder.objects.filter(id=docs.id).exists()
