"""
Test suite for Files module
Tests: upload limits, stored names, raw download, metadata CRUD, delete cleanup
"""
import os
import shutil
import tempfile

from django.core.files.uploadedfile import SimpleUploadedFile
from django.test import TestCase, override_settings
from rest_framework import status

from backoffice.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from backoffice.files import storage
from backoffice.files.models import FileItem


class StorageHelperTests(TestCase):
    def test_ascii_safe_name(self):
        self.assertEqual(storage.ascii_safe_name('rapport å.pdf'), 'rapport _.pdf')
        self.assertEqual(storage.ascii_safe_name('../../etc/passwd'), 'passwd')
        self.assertEqual(storage.ascii_safe_name(''), 'file')

    def test_generated_name_shape(self):
        stored = storage.generate_stored_name('Offer v2.pdf')
        timestamp, random_part, rest = stored.split('-', 2)
        self.assertTrue(timestamp.isdigit())
        self.assertEqual(len(random_part), 10)
        self.assertEqual(rest, 'Offer v2.pdf')

    def test_check_uploads_blocked_type(self):
        exe = SimpleUploadedFile('setup.exe', b'MZ', content_type='application/x-msdownload')
        error = storage.check_uploads([exe])
        self.assertEqual(error, 'Blocked file types: setup.exe (application/x-msdownload)')

    @override_settings(FILES_MAX_COUNT=1)
    def test_check_uploads_too_many(self):
        files = [SimpleUploadedFile(f'{i}.txt', b'x', content_type='text/plain') for i in range(2)]
        self.assertEqual(storage.check_uploads(files), 'Too many files (max 1)')

    @override_settings(FILES_MAX_SIZE=1024 * 1024)
    def test_check_uploads_too_large(self):
        big = SimpleUploadedFile('big.txt', b'x' * (1024 * 1024 + 1), content_type='text/plain')
        self.assertEqual(storage.check_uploads([big]), 'File too large (max 1MB)')


class FileAPITests(TestCase):
    """Test File API endpoints"""

    def setUp(self):
        self.upload_root = tempfile.mkdtemp()
        self.settings_override = override_settings(FILES_UPLOAD_ROOT=self.upload_root)
        self.settings_override.enable()
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)

    def tearDown(self):
        self.settings_override.disable()
        shutil.rmtree(self.upload_root, ignore_errors=True)

    def _upload(self, *files):
        return self.client.post('/api/files/upload/', {'files': list(files)}, format='multipart')

    def test_upload_and_download(self):
        pdf = SimpleUploadedFile('Offert 2025.pdf', b'%PDF-1.4 test', content_type='application/pdf')
        response = self._upload(pdf)
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(len(response.data), 1)
        created = response.data[0]
        self.assertEqual(created['name'], 'Offert 2025.pdf')
        self.assertTrue(created['url'].startswith('/api/files/raw/'))

        item = FileItem.objects.get(pk=created['id'])
        self.assertTrue(os.path.exists(os.path.join(self.upload_root, item.stored_name)))

        raw = self.client.get(created['url'])
        self.assertEqual(raw.status_code, status.HTTP_200_OK)
        self.assertEqual(b''.join(raw.streaming_content), b'%PDF-1.4 test')
        self.assertIn('attachment', raw['Content-Disposition'])
        self.assertIn('Offert 2025.pdf', raw['Content-Disposition'])
        raw.close()

    def test_batch_rejected_when_one_file_blocked(self):
        ok = SimpleUploadedFile('notes.txt', b'hello', content_type='text/plain')
        bad = SimpleUploadedFile('run.sh', b'#!/bin/sh', content_type='application/x-sh')
        response = self._upload(ok, bad)
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('run.sh (application/x-sh)', response.data['error'])
        self.assertFalse(FileItem.objects.exists())

    def test_upload_without_files(self):
        response = self.client.post('/api/files/upload/', {}, format='multipart')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'No files uploaded')

    def test_raw_file_of_other_user_not_served(self):
        txt = SimpleUploadedFile('secret.txt', b'secret', content_type='text/plain')
        url = self._upload(txt).data[0]['url']
        other = AuthenticatedAPIClient().authenticate_user(TestDataFactory.create_user())
        response = other.get(url)
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_delete_removes_stored_file(self):
        txt = SimpleUploadedFile('a.txt', b'a', content_type='text/plain')
        created = self._upload(txt).data[0]
        item = FileItem.objects.get(pk=created['id'])
        path = os.path.join(self.upload_root, item.stored_name)

        response = self.client.delete(f"/api/files/{created['id']}/")
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['message'], 'Item deleted successfully')
        self.assertFalse(os.path.exists(path))

    def test_delete_of_foreign_url_record_keeps_owner_file(self):
        txt = SimpleUploadedFile('owner.txt', b'owner data', content_type='text/plain')
        created = self._upload(txt).data[0]
        item = FileItem.objects.get(pk=created['id'])
        path = os.path.join(self.upload_root, item.stored_name)

        other = AuthenticatedAPIClient().authenticate_user(TestDataFactory.create_user())
        record = other.post('/api/files/', {'name': 'copy.txt', 'url': created['url']}, format='json')
        self.assertEqual(record.status_code, status.HTTP_201_CREATED)
        response = other.delete(f"/api/files/{record.data['id']}/")
        self.assertEqual(response.status_code, status.HTTP_200_OK)

        self.assertTrue(os.path.exists(path))
        raw = self.client.get(created['url'])
        self.assertEqual(raw.status_code, status.HTTP_200_OK)
        self.assertEqual(b''.join(raw.streaming_content), b'owner data')
        raw.close()

    def test_metadata_crud(self):
        response = self.client.post(
            '/api/files/', {'name': 'logo.png', 'url': 'https://cdn.example.com/logo.png', 'size': 10}, format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        file_id = response.data['id']

        response = self.client.patch(f'/api/files/{file_id}/', {'name': 'brand.png'}, format='json')
        self.assertEqual(response.data['name'], 'brand.png')

        listed = self.client.get('/api/files/')
        self.assertEqual([f['id'] for f in listed.data], [file_id])

    def test_other_users_item_not_found(self):
        item = TestDataFactory.create_file_item(TestDataFactory.create_user())
        response = self.client.get(f'/api/files/{item.id}/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data['error'], 'Item not found')
