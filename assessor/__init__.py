"""
Code assessment backend.

Scans candidate submissions, scores them with a remote chat model and
returns a ranked comparison.
"""

from .models import AssessmentRequest, Candidate, CandidateResult, DirectoryManifest, FileRecord, ScoreSet
from .orchestrator import analyze
from .scanner import scan, scan_file_list, select_directory

__all__ = [
    "AssessmentRequest",
    "Candidate",
    "CandidateResult",
    "DirectoryManifest",
    "FileRecord",
    "ScoreSet",
    "analyze",
    "scan",
    "scan_file_list",
    "select_directory",
]
