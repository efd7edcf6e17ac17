"""
ESS API client for logging in and downloading activity logs and project assignments.
"""

import requests
import pandas as pd
import logging
from datetime import date
from typing import Optional, List, Dict, Any, Iterable, Set

from .exceptions import AuthenticationError, FetchFailedError
from .models import ActivityRecord, LoginResult
from .projects import list_projects

LOGIN_PATH = "/auth/login"
LOG_ACTIVITY_PATH = "/log-act-detail-non-aj/table"
PROJECTS_CURRENT_PATH = "/project-assignment/table-for-home/"
PROJECTS_PREVIOUS_PATH = "/project-assignment/table-for-home-prev/"


class ESSClient:
    """ESS API client for activity logs and project assignments."""

    def __init__(self, base_url: str, timeout: int = 15):
        """
        Initialize ESS API client.

        Args:
            base_url: Base URL of the ESS API
            timeout: Request timeout in seconds
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.token = None
        self.username = None
        self.password = None
        self.employee_id = None

    def set_credentials(self, username: str, password: str) -> None:
        """Set authentication credentials."""
        self.username = username
        self.password = password

    def set_token(self, token: str) -> None:
        """Set authentication token directly."""
        self.token = token

    def clear_credentials(self) -> None:
        """Clear authentication credentials and token."""
        self.username = None
        self.password = None
        self.token = None
        self.employee_id = None

    def login(self, username: Optional[str] = None, password: Optional[str] = None) -> LoginResult:
        """
        Log in to the ESS API and keep the returned token.

        Args:
            username: ESS username (uses stored credentials if not provided)
            password: ESS password (uses stored credentials if not provided)

        Returns:
            LoginResult with token and user details

        Raises:
            AuthenticationError: if credentials are missing or rejected
            FetchFailedError: on transport errors or an unreadable response
        """
        if username is not None:
            self.set_credentials(username, password or "")

        if not self.username or not self.password:
            raise AuthenticationError("Username and password required for authentication")

        url = f"{self.base_url}{LOGIN_PATH}"
        try:
            response = requests.post(
                url,
                json={"username": self.username, "password": self.password},
                timeout=self.timeout
            )
        except requests.exceptions.RequestException as e:
            logging.error(f"ESS login request failed: {e}")
            raise FetchFailedError(f"login request failed: {e}") from e

        if response.status_code != 200:
            logging.error(f"ESS login rejected with status {response.status_code}")
            raise AuthenticationError(
                f"login failed, status: {response.status_code} {response.reason}",
                status_code=response.status_code,
                body=response.text
            )

        try:
            result = LoginResult.from_dict(response.json())
        except ValueError as e:
            raise FetchFailedError(f"login response is not valid JSON: {e}",
                                   status_code=response.status_code, body=response.text) from e

        self.token = result.id_token
        self.employee_id = result.user_info.employee_id
        logging.info("Login successful for user: %s", self.username)
        return result

    def _get_json(self, url: str, params: Dict[str, Any]) -> Dict[str, Any]:
        """GET a JSON document with the bearer token, raising FetchFailedError on any failure."""
        if not self.token:
            self.login()

        headers = {"Authorization": f"Bearer {self.token}"}
        try:
            response = requests.get(url, headers=headers, params=params, timeout=self.timeout)
        except requests.exceptions.Timeout as e:
            logging.error(f"Request timed out when fetching {url}")
            raise FetchFailedError(f"request timed out: {url}") from e
        except requests.exceptions.RequestException as e:
            logging.error(f"Request failed when fetching {url}: {e}")
            raise FetchFailedError(f"request failed: {e}") from e

        if response.status_code != 200:
            logging.error(f"Fetch of {url} failed with status {response.status_code}")
            raise FetchFailedError(
                f"fetch failed, status: {response.status_code} {response.reason}, body: {response.text}",
                status_code=response.status_code,
                body=response.text
            )

        try:
            payload = response.json()
        except ValueError as e:
            raise FetchFailedError(f"malformed response from {url}: {e}",
                                   status_code=response.status_code, body=response.text) from e

        if not isinstance(payload, dict) or not isinstance(payload.get("data") or [], list):
            raise FetchFailedError(f"unexpected response shape from {url}",
                                   status_code=response.status_code, body=response.text)
        return payload

    def fetch_log_activity(self, employee_id: Any, month: int, year: int) -> List[ActivityRecord]:
        """
        Fetch the activity log of one employee for one month.

        Args:
            employee_id: ESS employee ID
            month: Month number (1-12)
            year: Four-digit year

        Returns:
            Activity records sorted by date ascending, as the API returns them
        """
        params = {
            "sort": "date|asc",
            "idEmployee": employee_id,
            "months": month,
            "years": year,
        }
        payload = self._get_json(f"{self.base_url}{LOG_ACTIVITY_PATH}", params)

        try:
            records = [ActivityRecord.from_dict(item) for item in payload.get("data") or []]
        except (TypeError, ValueError, AttributeError) as e:
            raise FetchFailedError(f"malformed activity entry: {e}") from e

        logging.info(f"Fetched {len(records)} activities for {month:02d}-{year}")
        return records

    def fetch_activities(self, employee_id: Any, months: Iterable[int], year: int) -> List[ActivityRecord]:
        """Fetch and concatenate the activity logs of several months, in the given month order."""
        activities = []
        for month in months:
            activities.extend(self.fetch_log_activity(employee_id, month, year))
        return activities

    def fetch_project_list(self, path: str, employee_id: Any, month: int, year: int) -> List[str]:
        """
        Fetch project names from one project-assignment table.

        Args:
            path: Endpoint path (current or previous assignments)
            employee_id: ESS employee ID
            month: Month number
            year: Four-digit year

        Returns:
            Project names in response order, entries without a name skipped
        """
        params = {
            "sort": "startDate|desc",
            "page": 1,
            "per_page": 10,
            "employeeId": employee_id,
            "months": month,
            "years": year,
        }
        payload = self._get_json(f"{self.base_url}{path}", params)
        names = []
        for item in payload.get("data") or []:
            name = item.get("projectName") if isinstance(item, dict) else None
            if not name:
                logging.warning(f"Skipping assignment without a project name from {path}")
                continue
            names.append(str(name))
        return names

    def project_list(self, employee_id: Any, today: Optional[date] = None) -> Set[str]:
        """
        Return the de-duplicated projects of the current and previous assignment tables.

        Args:
            employee_id: ESS employee ID
            today: Reference date for the month/year query (defaults to today)
        """
        today = today or date.today()
        previous = self.fetch_project_list(PROJECTS_PREVIOUS_PATH, employee_id, today.month, today.year)
        current = self.fetch_project_list(PROJECTS_CURRENT_PATH, employee_id, today.month, today.year)

        projects = list_projects(current, previous)
        if not projects:
            logging.warning(f"No project assignments found for employee {employee_id}")
        return projects

    def fetch_activities_dataframe(self, employee_id: Any, months: Iterable[int], year: int) -> pd.DataFrame:
        """Fetch activities of several months as a DataFrame with ESS column names."""
        activities = self.fetch_activities(employee_id, months, year)
        columns = ["id", "dateString", "activityDetail", "duration", "overtime", "projectName"]
        return pd.DataFrame([a.to_dict() for a in activities], columns=columns)

    def download_activities_to_file(self, output_file: str, employee_id: Any, months: Iterable[int],
                                    year: int, file_format: str = "csv") -> bool:
        """
        Download raw activities directly to a file.

        Args:
            output_file: Path to output file
            employee_id: ESS employee ID
            months: Month numbers to fetch
            year: Four-digit year
            file_format: Output format ('csv', 'excel', 'json')

        Returns:
            True if the file was written, False if there was nothing to write or the format is unknown

        Raises:
            FetchFailedError: if any fetch fails
        """
        df = self.fetch_activities_dataframe(employee_id, months, year)

        if df.empty:
            logging.error("No activities to download")
            return False

        if file_format.lower() == "csv":
            df.to_csv(output_file, index=False)
        elif file_format.lower() in ["excel", "xlsx"]:
            df.to_excel(output_file, index=False)
        elif file_format.lower() == "json":
            df.to_json(output_file, orient="records", indent=2)
        else:
            logging.error(f"Unsupported file format: {file_format}")
            return False

        logging.info(f"Activities downloaded to {output_file}")
        return True
