"""
Tests for site photos and notes
"""
from datetime import timedelta
from django.test import TestCase
from django.utils import timezone
from rest_framework import status
from sitetrack.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from sitetrack.journal.models import Note, Photo


class PhotoTests(TestCase):

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)
        self.site = TestDataFactory.create_site()

    def test_upload_photo(self):
        data = {'site_id': self.site.id, 'title': 'Foundation', 'image_url': 'https://images.example.com/f.jpg'}
        response = self.client.post('/api/v1/photos/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertIsNotNone(response.data['date'])

    def test_photo_requires_valid_url(self):
        data = {'site_id': self.site.id, 'title': 'Broken', 'image_url': 'not a url'}
        response = self.client.post('/api/v1/photos/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('image_url', response.data)

    def test_site_photos_newest_first(self):
        old = TestDataFactory.create_photo(site=self.site, title='Old')
        Photo.objects.filter(pk=old.pk).update(date=timezone.now() - timedelta(days=3))
        TestDataFactory.create_photo(site=self.site, title='New')
        response = self.client.get(f'/api/v1/sites/{self.site.id}/photos/')
        self.assertEqual([p['title'] for p in response.data], ['New', 'Old'])

    def test_delete_photo(self):
        photo = TestDataFactory.create_photo(site=self.site)
        response = self.client.delete(f'/api/v1/photos/{photo.id}/')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.assertEqual(Photo.objects.count(), 0)


class NoteTests(TestCase):

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)
        self.site = TestDataFactory.create_site()

    def test_create_note(self):
        data = {'site_id': self.site.id, 'title': 'Inspection', 'content': 'Column C4 needs rework', 'category': 'Quality'}
        response = self.client.post('/api/v1/notes/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)

    def test_update_refreshes_date(self):
        note = TestDataFactory.create_note(site=self.site)
        stale = timezone.now() - timedelta(days=10)
        Note.objects.filter(pk=note.pk).update(date=stale)

        response = self.client.put(f'/api/v1/notes/{note.id}/', {'content': 'Updated'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        note.refresh_from_db()
        self.assertEqual(note.content, 'Updated')
        self.assertGreater(note.date, stale)

    def test_site_notes_filters(self):
        TestDataFactory.create_note(site=self.site, title='Pour schedule', category='Planning')
        TestDataFactory.create_note(site=self.site, title='Crack found', content='Hairline crack on slab', category='Quality')
        url = f'/api/v1/sites/{self.site.id}/notes/'
        self.assertEqual(len(self.client.get(url).data), 2)
        self.assertEqual([n['title'] for n in self.client.get(url, {'category': 'quality'}).data], ['Crack found'])
        self.assertEqual([n['title'] for n in self.client.get(url, {'search': 'slab'}).data], ['Crack found'])

    def test_missing_note_404(self):
        response = self.client.get('/api/v1/notes/99999/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
