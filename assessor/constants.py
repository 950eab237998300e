MAX_CODE_FILES = 100
MAX_FILE_SIZE = 1024 * 1024

CODE_EXTENSIONS = (
    ".js", ".jsx", ".ts", ".tsx", ".py", ".java", ".cpp", ".c", ".cs", ".php",
    ".rb", ".go", ".rs", ".swift", ".kt", ".scala", ".html", ".css", ".scss",
    ".sass", ".less", ".vue", ".svelte", ".md", ".json", ".yaml", ".yml",
    ".xml", ".sql", ".sh", ".bash", ".ps1", ".r", ".m", ".dart",
)

SKIP_DIRECTORIES = frozenset({
    "node_modules", ".git", "dist", "build", ".next", "coverage", "__pycache__",
})

FILE_TYPES = {
    "js": "JavaScript",
    "jsx": "React JSX",
    "ts": "TypeScript",
    "tsx": "React TypeScript",
    "py": "Python",
    "java": "Java",
    "cpp": "C++",
    "c": "C",
    "cs": "C#",
    "php": "PHP",
    "rb": "Ruby",
    "go": "Go",
    "rs": "Rust",
    "swift": "Swift",
    "kt": "Kotlin",
    "html": "HTML",
    "css": "CSS",
    "scss": "SCSS",
    "vue": "Vue",
    "md": "Markdown",
    "json": "JSON",
    "yaml": "YAML",
    "yml": "YAML",
}
DEFAULT_FILE_TYPE = "Code"

# Most capable first; quota/rate-limit failures walk down this list.
FALLBACK_LADDER = ("gpt-4o", "gpt-4o-mini", "gpt-3.5-turbo")

AVAILABLE_MODELS = [
    {
        "id": "gpt-4o",
        "name": "GPT-4o",
        "description": "Most capable model, best analysis quality. Requires GPT-4o access.",
    },
    {
        "id": "gpt-4o-mini",
        "name": "GPT-4o mini",
        "description": "Faster and cheaper, good enough for most submissions.",
    },
    {
        "id": "gpt-3.5-turbo",
        "name": "GPT-3.5 Turbo",
        "description": "Cheapest option, lower quality feedback.",
    },
]

TEMPERATURE = 0.2
MAX_TOKENS = 2000

LOCAL_PATH_PLACEHOLDER = "Local path: {path}"
FILE_HEADER = "// File: {path}"

ANALYSIS_PROMPT = """
As a coding expert, please analyze the following {subject} for a {role_name} position at {seniority_level} level.

Assessment description: {description}
{reference}
{source_label} {source}

{instructions}

Analyze the code for:
1. Readability (variable names, comments, consistent style)
2. Extensibility (architecture, patterns, modularity)
3. Testability (separation of concerns, dependency injection, pure functions)
4. Originality vs AI-generated appearance
5. Seniority fit for a {seniority_level} role

Provide scores from 0-100 for each category and detailed feedback including strengths and areas to improve.
Format your response as JSON with the following structure:
{{
  "scores": {{
    "readability": number,
    "extensibility": number,
    "testability": number,
    "originalityScore": number,
    "seniorityFit": number,
    "overallScore": number
  }},
  "feedback": ["point 1", "point 2", ...],
  "strengths": ["strength 1", "strength 2", ...],
  "areasToImprove": ["area 1", "area 2", ...]
}}
"""

GITHUB_INSTRUCTIONS = (
    "Please browse the repository contents directly. If this is a specific branch or pull "
    "request URL, please examine that specific code.\n"
    "Look through the code files, focusing on the main application logic, and ignoring build "
    "artifacts, dependencies, and non-code files."
)
LOCAL_INSTRUCTIONS = "Please analyze the provided code."

NEUTRAL_SCORE = 50
NEUTRAL_FEEDBACK = ["Failed to parse LLM analysis results"]
NEUTRAL_STRENGTHS = ["Could not determine strengths"]
NEUTRAL_AREAS = ["Could not determine areas for improvement"]

MISSING_FEEDBACK = ["No detailed feedback provided"]
MISSING_STRENGTHS = ["No strengths identified"]
MISSING_AREAS = ["No areas to improve identified"]

DEMO_FEEDBACK = [
    "Good use of design patterns",
    "Could improve documentation",
    "Test coverage is adequate",
    "Consistent naming throughout the codebase",
    "Some functions are longer than they need to be",
    "Configuration is cleanly separated from logic",
]
DEMO_STRENGTHS = [
    "Code organization",
    "Performance optimization",
    "Clear module boundaries",
    "Readable control flow",
    "Sensible error messages",
]
DEMO_AREAS = [
    "Error handling",
    "Edge case coverage",
    "Inline documentation",
    "Dependency injection",
    "Test isolation",
]
