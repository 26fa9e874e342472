# =======================================================================================
# checkpoint/models/subjects.py - Event Subjects
# =======================================================================================
"""
Events carry a single free-text subject name. Visitors are encoded into it as
``VISITOR: <name> (Host: <host>)``; these helpers keep that encoding in one
place and give callers a tagged value to branch on instead of string checks.
"""
import re
from dataclasses import dataclass
from typing import Optional, Union
from .enums import SubjectKind

VISITOR_PREFIX = "VISITOR: "
UNKNOWN_HOST = "Unknown"

_VISITOR_RE = re.compile(r"^VISITOR: (?P<name>.*) \(Host: (?P<host>.*)\)$")

@dataclass(frozen=True)
class EmployeeSubject:
    name: str
    kind: SubjectKind = SubjectKind.EMPLOYEE

@dataclass(frozen=True)
class VisitorSubject:
    name: str
    host: str
    kind: SubjectKind = SubjectKind.VISITOR

Subject = Union[EmployeeSubject, VisitorSubject]

def format_visitor_name(visitor_name: str, host: Optional[str] = None) -> str:
    return f"{VISITOR_PREFIX}{visitor_name} (Host: {host or UNKNOWN_HOST})"

def parse_subject(subject_name: str) -> Subject:
    """Decode a stored subject name; anything not visitor-shaped is an employee."""
    match = _VISITOR_RE.match(subject_name or "")
    if match:
        return VisitorSubject(name=match.group("name"), host=match.group("host"))
    return EmployeeSubject(name=subject_name)

def is_visitor(subject_name: str) -> bool:
    return isinstance(parse_subject(subject_name), VisitorSubject)
