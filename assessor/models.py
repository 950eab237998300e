from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


class FileRecord(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str = Field(..., description="File name without directories.")
    path: str = Field(..., description="Slash-joined path relative to the scan root.")
    content: str = Field("", description="Decoded file text.")
    type: str = Field("Code", description="Display label derived from the extension.")


class DirectoryManifest(BaseModel):
    root_path: str = Field(..., description="Name of the scanned root directory.")
    total_file_count: int = Field(0, description="Number of supported files discovered.")
    files: List[FileRecord] = Field(default_factory=list)
    discovered_paths: List[str] = Field(default_factory=list)

    def summary(self) -> str:
        return f"Found {self.total_file_count} files ({len(self.files)} code files)"


class Candidate(BaseModel):
    id: str
    name: str = ""
    github_repo: str = ""
    local_path: str = ""
    code_analyzed: bool = False
    manifest: Optional[DirectoryManifest] = None

    @property
    def display_name(self) -> str:
        return self.name or f"Candidate {self.id}"

    def has_code_source(self) -> bool:
        return bool(self.github_repo.strip() or self.local_path.strip())


class AssessmentRequest(BaseModel):
    model_config = ConfigDict(frozen=True)

    role_name: str
    seniority_level: Literal["junior", "mid", "senior", "lead"] = "mid"
    description: str
    reference_link: Optional[str] = None


class ScoreSet(BaseModel):
    model_config = ConfigDict(frozen=True)

    readability: int = Field(0, ge=0, le=100)
    extensibility: int = Field(0, ge=0, le=100)
    testability: int = Field(0, ge=0, le=100)
    originality: int = Field(0, ge=0, le=100)
    seniority_fit: int = Field(0, ge=0, le=100)
    overall_score: int = Field(0, ge=0, le=100)


class CandidateResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    candidate_id: str
    candidate_name: str
    scores: ScoreSet
    feedback: List[str] = Field(default_factory=list)
    strengths: List[str] = Field(default_factory=list)
    areas_to_improve: List[str] = Field(default_factory=list)


class Notification(BaseModel):
    title: str
    description: str = ""
    level: Literal["info", "warning", "error"] = "info"


class AnalyzeRequest(BaseModel):
    candidates: List[Candidate]
    assessment: AssessmentRequest


class AnalyzeResponse(BaseModel):
    results: List[CandidateResult]
    notifications: List[Notification] = Field(default_factory=list)
