"""
Tests for the HTTP API.
"""

import unittest
import os
import sys
from io import BytesIO
from unittest.mock import MagicMock, patch

from fastapi.testclient import TestClient
from openpyxl import load_workbook

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from log_converter.api import app, get_client
from log_converter.ess_client import ESSClient
from log_converter.exceptions import AuthenticationError, FetchFailedError
from log_converter.models import ActivityRecord, LoginResult, UserInfo


class FakeESSClient:
    """In-memory stand-in for ESSClient."""

    def __init__(self, activities=None, projects=None, error=None):
        self.activities = activities or []
        self.projects = projects or set()
        self.error = error
        self.token = None
        self.fetch_calls = []

    def login(self, username, password):
        if self.error:
            raise self.error
        return LoginResult(id_token="token-123",
                           user_info=UserInfo(employee_id=42, employee_name="Budi Santoso"))

    def set_token(self, token):
        self.token = token

    def fetch_activities(self, employee_id, months, year):
        self.fetch_calls.append((employee_id, list(months), year))
        if self.error:
            raise self.error
        return self.activities

    def project_list(self, employee_id):
        if self.error:
            raise self.error
        return self.projects


ACTIVITIES = [
    ActivityRecord(1, "01-07-2025", "Sprint planning", 5, 0, "X"),
    ActivityRecord(2, "15-08-2025", "Release", 3, 0, "X"),
    ActivityRecord(3, "02-07-2025", "Other work", 9, 0, "Y"),
]


def conversion_request(**overrides):
    body = {
        "employee_id": "42",
        "token": "token-123",
        "months": [7, 8],
        "year": 2025,
        "project_name": "X",
        "randomize_log": {"is_random": False, "min_duration": 0, "max_duration": 0},
    }
    body.update(overrides)
    return body


class TestAPI(unittest.TestCase):
    """Test API endpoints with a fake ESS client."""

    def setUp(self):
        self.fake = FakeESSClient(activities=ACTIVITIES, projects={"Beta", "Alpha"})
        app.dependency_overrides[get_client] = lambda: self.fake
        self.client = TestClient(app)

    def tearDown(self):
        app.dependency_overrides.clear()

    def test_health(self):
        """Test health endpoint."""
        response = self.client.get("/api/v1/health")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["status"], "healthy")

    def test_authenticate(self):
        """Test login returns the token and employee."""
        response = self.client.post("/api/v1/authenticate", json={"username": "budi", "password": "secret"})

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), {
            "id_token": "token-123",
            "employee_id": 42,
            "employee_name": "Budi Santoso",
        })

    def test_authenticate_requires_fields(self):
        """Test empty credentials fail validation."""
        response = self.client.post("/api/v1/authenticate", json={"username": "budi", "password": ""})
        self.assertEqual(response.status_code, 422)

    def test_authenticate_rejected(self):
        """Test rejected logins map to 401."""
        self.fake.error = AuthenticationError("login failed, status: 401 Unauthorized", status_code=401)

        response = self.client.post("/api/v1/authenticate", json={"username": "budi", "password": "bad"})

        self.assertEqual(response.status_code, 401)
        self.assertEqual(response.json()["error"], "AuthenticationError")

    def test_log_converter_returns_workbook(self):
        """Test the conversion endpoint returns an xlsx attachment."""
        response = self.client.post("/api/v1/log-converter", json=conversion_request())

        self.assertEqual(response.status_code, 200)
        self.assertTrue(response.headers["content-type"].startswith(
            "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"))
        self.assertIn("attachment; filename=timesheet.xlsx", response.headers["content-disposition"])
        self.assertEqual(self.fake.token, "token-123")
        self.assertEqual(self.fake.fetch_calls, [("42", [7, 8], 2025)])

        ws = load_workbook(BytesIO(response.content)).active
        self.assertEqual(ws["A1"].value, "JULI")
        self.assertEqual(ws["C3"].value, "Sprint planning")
        self.assertEqual(ws["A5"].value, "AGUSTUS")

    def test_log_converter_randomized(self):
        """Test randomized durations stay in range."""
        body = conversion_request(randomize_log={"is_random": True, "min_duration": 4, "max_duration": 6})

        response = self.client.post("/api/v1/log-converter", json=body)

        ws = load_workbook(BytesIO(response.content)).active
        self.assertTrue(4 <= ws["B3"].value <= 6)
        self.assertTrue(4 <= ws["B7"].value <= 6)

    def test_log_converter_invalid_range(self):
        """Test an inverted range is rejected before fetching."""
        body = conversion_request(randomize_log={"is_random": True, "min_duration": 2, "max_duration": 1})

        response = self.client.post("/api/v1/log-converter", json=body)

        self.assertEqual(response.status_code, 422)
        self.assertEqual(response.json()["error"], "InvalidDurationRangeError")
        self.assertEqual(self.fake.fetch_calls, [])

    def test_log_converter_project_not_found(self):
        """Test an unknown project maps to 404."""
        response = self.client.post("/api/v1/log-converter", json=conversion_request(project_name="Z"))

        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json()["error"], "ProjectNotFoundError")

    def test_log_converter_malformed_date(self):
        """Test a malformed date maps to 422 naming the date."""
        self.fake.activities = [ActivityRecord(1, "2025-07-01", "Work", 8, 0, "X")]

        response = self.client.post("/api/v1/log-converter", json=conversion_request())

        self.assertEqual(response.status_code, 422)
        self.assertIn("2025-07-01", response.json()["message"])

    def test_log_converter_fetch_failed(self):
        """Test upstream failures map to 502."""
        self.fake.error = FetchFailedError("fetch failed, status: 500", status_code=500)

        response = self.client.post("/api/v1/log-converter", json=conversion_request())

        self.assertEqual(response.status_code, 502)

    def test_log_converter_requires_months(self):
        """Test an empty month list fails validation."""
        response = self.client.post("/api/v1/log-converter", json=conversion_request(months=[]))
        self.assertEqual(response.status_code, 422)

    def test_log_converter_month_out_of_range(self):
        """Test months outside 1 to 12 fail validation before fetching."""
        for months in ([13], [0, 7]):
            response = self.client.post("/api/v1/log-converter", json=conversion_request(months=months))
            self.assertEqual(response.status_code, 422, months)
        self.assertEqual(self.fake.fetch_calls, [])

    def test_projects(self):
        """Test project names are returned sorted."""
        response = self.client.get("/api/v1/projects", params={"employee_id": "42", "token": "token-123"})

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), {"projects": ["Alpha", "Beta"]})
        self.assertEqual(self.fake.token, "token-123")

    @patch("log_converter.ess_client.requests.get")
    def test_projects_skip_unnamed_assignments(self, mock_get):
        """Test assignments without a project name do not break the listing."""
        def response_for(names):
            response = MagicMock(status_code=200)
            response.json.return_value = {"data": [{"projectName": name} for name in names]}
            return response

        mock_get.side_effect = [response_for([None, "Alpha"]), response_for(["Beta"])]
        app.dependency_overrides[get_client] = lambda: ESSClient("http://ess.test/api")

        response = self.client.get("/api/v1/projects", params={"employee_id": "42", "token": "token-123"})

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), {"projects": ["Alpha", "Beta"]})


if __name__ == '__main__':
    unittest.main()
