import unittest
from unittest.mock import Mock
import sys
import os

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from flask import Flask

from fakes import FakeSpreadsheet, FakeWorksheet
from models.checkin import CheckinService
from models.lock import DocumentLock
from models.memory import MemoryCheckinLog, MemoryConfigStore, MemoryDirectory
from models.templates import MessageTemplates
from routes.admin import register_admin_routes
from routes.checkin import register_checkin_routes


class TestRoutes(unittest.TestCase):

    SAMPLE_ATTENDEES = [
        {'id': 'S1', 'phone': '0900', 'name': 'Ann', 'serial': '7'},
    ]

    def setUp(self):
        """Set up test Flask app with in-memory stores"""
        self.app = Flask(__name__)
        self.app.config['TESTING'] = True

        self.config = MemoryConfigStore()
        self.log = MemoryCheckinLog()
        self.templates = MessageTemplates(self.config)
        self.service = CheckinService(
            directory=MemoryDirectory.from_records(self.SAMPLE_ATTENDEES),
            log=self.log,
            templates=self.templates,
            lock=DocumentLock('routes-test'),
        )
        self.spreadsheet = FakeSpreadsheet([
            FakeWorksheet('Summary', [['total']], formulas={(1, 2): '=1+1'}),
        ])
        self.invalidate = Mock()

        register_checkin_routes(self.app, self.service, self.templates, self.config)
        register_admin_routes(self.app, self.config, lambda: self.spreadsheet,
                              lambda: {'Directory': {'ttl_seconds': 300}}, self.invalidate)
        self.client = self.app.test_client()

    def test_checkin_success(self):
        response = self.client.post('/api/checkin', json={'id': 'S1'})
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.get_json(),
                         {'success': True, 'message': 'check-in successful; name: Ann, serial: 7'})
        self.assertEqual(len(self.log.records()), 1)

    def test_checkin_accepts_form_data(self):
        response = self.client.post('/api/checkin', data={'id': ' 0900 '})
        self.assertTrue(response.get_json()['success'])

    def test_checkin_not_found(self):
        response = self.client.post('/api/checkin', json={'id': 'S9'})
        self.assertEqual(response.get_json(), {'success': False, 'message': 'attendee not found'})
        self.assertEqual(self.log.records(), [])

    def test_checkin_missing_id(self):
        response = self.client.post('/api/checkin', json={})
        self.assertFalse(response.get_json()['success'])

    def test_update_and_get_template(self):
        response = self.client.post('/api/template', json={'template': 'ok {{name}} {{serial}}'})
        self.assertEqual(response.get_json(), {'success': True, 'message': 'message template updated'})

        response = self.client.get('/api/template')
        self.assertEqual(response.get_json()['template'], 'ok {{name}} {{serial}}')

        response = self.client.post('/api/checkin', json={'id': 'S1'})
        self.assertEqual(response.get_json()['message'], 'ok Ann 7')

    def test_update_template_requires_value(self):
        response = self.client.post('/api/template', json={})
        self.assertEqual(response.status_code, 400)

    def test_update_template_rejects_non_string(self):
        response = self.client.post('/api/template', json={'template': 5})
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.get_json()['message'], 'template must be a string')

        response = self.client.post('/api/checkin', json={'id': 'S1'})
        self.assertEqual(response.get_json(),
                         {'success': True, 'message': 'check-in successful; name: Ann, serial: 7'})

    def test_checkin_non_object_json_returns_json(self):
        response = self.client.post('/api/checkin', json=['S1'])
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.mimetype, 'application/json')
        self.assertEqual(response.get_json(), {'success': False, 'message': 'attendee not found'})
        self.assertEqual(self.log.records(), [])

    def test_update_template_non_object_json_returns_json(self):
        response = self.client.post('/api/template', json='ok {{name}}')
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.mimetype, 'application/json')

    def test_base_url_round_trip(self):
        self.client.post('/api/base-url', json={'url': 'https://example.org/checkin'})
        response = self.client.get('/api/base-url')
        self.assertEqual(response.get_json()['url'], 'https://example.org/checkin')

    def test_formula_backup_and_restore(self):
        response = self.client.post('/api/formulas/backup')
        self.assertEqual(response.get_json()['cells'], ['Summary!B1'])

        response = self.client.post('/api/formulas/restore')
        self.assertTrue(response.get_json()['success'])

    def test_formula_restore_without_backup(self):
        response = self.client.post('/api/formulas/restore')
        self.assertFalse(response.get_json()['success'])

    def test_formula_backup_error_returns_json(self):
        self.spreadsheet.worksheets = Mock(side_effect=RuntimeError('offline'))
        response = self.client.post('/api/formulas/backup')
        self.assertEqual(response.status_code, 500)
        self.assertIn('offline', response.get_json()['message'])

    def test_metrics(self):
        response = self.client.get('/api/metrics')
        data = response.get_json()
        self.assertIn('checkins_succeeded', data)
        self.assertEqual(data['cache_details'], {'Directory': {'ttl_seconds': 300}})

    def test_cache_clear(self):
        response = self.client.post('/api/cache/clear')
        self.assertTrue(response.get_json()['success'])
        self.invalidate.assert_called_once_with()


if __name__ == '__main__':
    unittest.main()
