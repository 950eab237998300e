"""
Batch analysis of candidate submissions.

Candidates are analyzed one after the other. A failure for one candidate is
reported and skipped; only a batch that yields no result at all fails.
"""

import logging
import random
from dataclasses import dataclass
from typing import Callable, List, Literal, Optional, Sequence

from assessor import llm
from assessor.config import AnalysisConfig
from assessor.constants import (
    ANALYSIS_PROMPT,
    FALLBACK_LADDER,
    FILE_HEADER,
    GITHUB_INSTRUCTIONS,
    LOCAL_INSTRUCTIONS,
    LOCAL_PATH_PLACEHOLDER,
)
from assessor.demo import generate_demo_results
from assessor.errors import (
    AssessorError,
    MalformedRemoteResponse,
    NoCredential,
    NoResults,
    NoValidCodeSource,
    QuotaExceeded,
    RateLimited,
)
from assessor.models import AssessmentRequest, Candidate, CandidateResult, DirectoryManifest, Notification
from assessor.parsing import Defaulted, decode_analysis, neutral_result

Notifier = Callable[[Notification], None]


def _ignore(notification: Notification):
    pass


def next_model(model: str) -> Optional[str]:
    """The next cheaper model on the ladder, or None at the bottom or off the ladder."""
    if model not in FALLBACK_LADDER:
        return None
    index = FALLBACK_LADDER.index(model)
    if index + 1 >= len(FALLBACK_LADDER):
        return None
    return FALLBACK_LADDER[index + 1]


def concatenate_files(manifest: DirectoryManifest) -> str:
    return "\n\n".join(f"{FILE_HEADER.format(path=f.path)}\n{f.content}" for f in manifest.files)


@dataclass(frozen=True)
class CodeSource:
    """What the model is asked to review: a repository URL or local code."""
    kind: Literal["github", "local"]
    text: str

    @property
    def is_github(self) -> bool:
        return self.kind == "github"


def select_code_source(candidate: Candidate) -> CodeSource:
    """GitHub URL if given, otherwise the scanned local files."""
    if candidate.github_repo.strip():
        logging.info(f"Using GitHub repository URL for {candidate.display_name}: {candidate.github_repo}")
        return CodeSource(kind="github", text=candidate.github_repo.strip())

    if candidate.local_path.strip():
        logging.info(f"Using local path for {candidate.display_name}: {candidate.local_path}")
        if candidate.manifest and candidate.manifest.files:
            return CodeSource(kind="local", text=concatenate_files(candidate.manifest))
        return CodeSource(kind="local", text=LOCAL_PATH_PLACEHOLDER.format(path=candidate.local_path.strip()))

    raise NoValidCodeSource()


def build_analysis_prompt(source: CodeSource, request: AssessmentRequest) -> str:
    # local file contents may mention github.com, so only the kind decides the framing
    reference = f"Reference assessment: {request.reference_link}\n" if request.reference_link else ""
    return ANALYSIS_PROMPT.format(
        subject="GitHub repository" if source.is_github else "code",
        role_name=request.role_name,
        seniority_level=request.seniority_level,
        description=request.description,
        reference=reference,
        source_label="GitHub Repository URL:" if source.is_github else "Code Source:",
        source=source.text,
        instructions=GITHUB_INSTRUCTIONS if source.is_github else LOCAL_INSTRUCTIONS,
    )


async def complete_with_fallback(client, prompt: str, model: str, notify: Notifier = _ignore) -> str:
    """
    Request a completion, moving down the model ladder on quota or rate limits.

    Each cheaper model is tried once. The error surfaces once there is no
    cheaper model left.
    """
    while True:
        try:
            return await llm.request_completion(client, prompt, model)
        except (QuotaExceeded, RateLimited) as e:
            fallback = next_model(model)
            if fallback is None:
                raise
            logging.warning(f"{type(e).__name__} on {model}, retrying with {fallback}")
            notify(Notification(
                title=f"Switching to {fallback}",
                description=f"{e.user_message} Retrying with a cheaper model.",
                level="warning",
            ))
            model = fallback


async def analyze_candidate(
    client, candidate: Candidate, request: AssessmentRequest, model: str, notify: Notifier = _ignore
) -> CandidateResult:
    code_source = select_code_source(candidate)
    prompt = build_analysis_prompt(code_source, request)

    logging.info(f"Calling LLM API for {candidate.display_name}...")
    try:
        text = await complete_with_fallback(client, prompt, model, notify)
    except MalformedRemoteResponse as e:
        logging.warning(f"Empty LLM response for {candidate.display_name}, using neutral scores")
        decoded = Defaulted(neutral_result(candidate), reason=e.user_message)
    else:
        logging.info(f"LLM API response received for {candidate.display_name}")
        decoded = decode_analysis(text, candidate)

    if isinstance(decoded, Defaulted):
        notify(Notification(
            title=f"Partial analysis for {candidate.display_name}",
            description="The analysis could not be read, neutral scores are shown instead.",
            level="warning",
        ))
    return decoded.result


async def analyze(
    candidates: Sequence[Candidate],
    request: AssessmentRequest,
    config: AnalysisConfig,
    *,
    client=None,
    notify: Optional[Notifier] = None,
    rng: Optional[random.Random] = None,
) -> List[CandidateResult]:
    """
    Score every candidate that has a code source.

    Returns results sorted by overall score, best first. Raises
    ``NoCredential`` when no key is configured outside demo mode and
    ``NoResults`` when nothing could be analyzed.
    """
    notify = notify or _ignore

    if config.demo_mode:
        return generate_demo_results(candidates, request, rng)

    if not config.has_credential:
        raise NoCredential()

    if client is None:
        client = llm.create_client(config)

    results: List[CandidateResult] = []
    for candidate in candidates:
        if not candidate.has_code_source():
            logging.info(f"Skipping candidate {candidate.display_name} - no code source provided")
            continue

        logging.info(f"Starting analysis for candidate: {candidate.display_name}")
        try:
            results.append(await analyze_candidate(client, candidate, request, config.model, notify))
        except AssessorError as e:
            logging.error(f"Error analyzing code for candidate {candidate.display_name}: {e.detail or e}")
            notify(Notification(
                title=f"Analysis failed for {candidate.display_name}",
                description=e.user_message,
                level="error",
            ))
        except Exception as e:
            logging.exception(f"Unexpected error analyzing code for candidate {candidate.display_name}: {e}")
            notify(Notification(
                title=f"Analysis failed for {candidate.display_name}",
                description="Could not analyze the code. Please try again.",
                level="error",
            ))

    if not results:
        raise NoResults()

    return sorted(results, key=lambda r: r.scores.overall_score, reverse=True)
