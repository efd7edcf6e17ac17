"""
Group activity records into calendar months for a single project.
"""

import re
from collections import OrderedDict
from datetime import datetime
from typing import Dict, Iterable, List

from .exceptions import MalformedDateError
from .models import ActivityRecord

DATE_FORMAT = "%d-%m-%Y"
KEY_FORMAT = "%Y-%m"
DATE_PATTERN = re.compile(r"\d{2}-\d{2}-\d{4}")


def month_key(date_string: str) -> str:
    """
    Return the YYYY-MM group key for a DD-MM-YYYY date.

    Raises:
        MalformedDateError: if the date does not match DD-MM-YYYY
    """
    if not isinstance(date_string, str) or not DATE_PATTERN.fullmatch(date_string):
        raise MalformedDateError(date_string)
    try:
        parsed = datetime.strptime(date_string, DATE_FORMAT)
    except ValueError:
        raise MalformedDateError(date_string) from None
    return parsed.strftime(KEY_FORMAT)


def group_by_month(records: Iterable[ActivityRecord], project_filter: str) -> "OrderedDict[str, List[ActivityRecord]]":
    """
    Partition the records of one project by month.

    Records from other projects are dropped before their dates are looked at.
    Records keep their arrival order inside each month.

    Args:
        records: Activity records in the order they were fetched
        project_filter: Exact, case-sensitive project name to keep

    Returns:
        Ordered mapping of YYYY-MM keys, ascending, to record lists
    """
    grouped: Dict[str, List[ActivityRecord]] = {}
    for record in records:
        if record.project_name != project_filter:
            continue
        grouped.setdefault(month_key(record.date_string), []).append(record)

    return OrderedDict((key, grouped[key]) for key in sorted(grouped))
