"""
Data models for ESS activity logs and export requests.
"""

from dataclasses import dataclass, field
from typing import Dict, Any, List

from .exceptions import InvalidDurationRangeError


def _as_int(value: Any, name: str) -> int:
    """Read an integral JSON number; null counts as 0, fractions are rejected."""
    if value is None:
        return 0
    if isinstance(value, bool):
        raise ValueError(f"{name} must be an integer, got {value!r}")
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str) and value.strip().lstrip("-").isdigit():
        return int(value)
    raise ValueError(f"{name} must be an integer, got {value!r}")


@dataclass(frozen=True)
class ActivityRecord:
    """One activity log entry as returned by the ESS API."""
    id: int
    date_string: str
    activity_detail: str
    duration: int
    overtime: int
    project_name: str

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ActivityRecord":
        """
        Build a record from an ESS JSON object.

        Args:
            data: Dictionary using the ESS camelCase keys

        Returns:
            ActivityRecord instance
        """
        return cls(
            id=_as_int(data.get("id"), "id"),
            date_string=str(data.get("dateString") or ""),
            activity_detail=str(data.get("activityDetail") or ""),
            duration=_as_int(data.get("duration"), "duration"),
            overtime=_as_int(data.get("overtime"), "overtime"),
            project_name=str(data.get("projectName") or ""),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Return the record using the ESS camelCase keys."""
        return {
            "id": self.id,
            "dateString": self.date_string,
            "activityDetail": self.activity_detail,
            "duration": self.duration,
            "overtime": self.overtime,
            "projectName": self.project_name,
        }


@dataclass
class ExportParams:
    """Parameters for one timesheet export."""
    project_filter: str
    is_randomize_duration: bool = False
    min_duration: int = 0
    max_duration: int = 0

    def validate(self) -> None:
        """Raise InvalidDurationRangeError if the randomization range is inverted."""
        if self.is_randomize_duration and self.max_duration < self.min_duration:
            raise InvalidDurationRangeError(self.min_duration, self.max_duration)


@dataclass
class UserInfo:
    """Employee details attached to a login response."""
    id: int = 0
    username: str = ""
    kode: str = ""
    label: str = ""
    employee_id: int = 0
    role_id: int = 0
    employee_name: str = ""

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "UserInfo":
        return cls(
            id=int(data.get("id") or 0),
            username=data.get("username") or "",
            kode=data.get("kode") or "",
            label=data.get("label") or "",
            employee_id=int(data.get("employeeId") or 0),
            role_id=int(data.get("roleId") or 0),
            employee_name=data.get("employeeName") or "",
        )


@dataclass
class LoginResult:
    """Token and user details returned by the ESS login endpoint."""
    id_token: str
    user_info: UserInfo
    role_id: int = 0
    list_menu: List[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "LoginResult":
        # the ESS API echoes the password hash inside userInfo; it is not kept
        return cls(
            id_token=data.get("idToken") or "",
            user_info=UserInfo.from_dict(data.get("userInfo") or {}),
            role_id=int(data.get("roleId") or 0),
            list_menu=list(data.get("listMenu") or []),
        )
