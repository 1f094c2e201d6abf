"""Prompt templates for every LLM call the service makes.

All functions are pure: they only format their inputs.  Embedded repository
content is passed through as-is; size is checked separately by
:mod:`repo_onboarding.services.prompt_budget`.
"""

from __future__ import annotations

import json
from typing import Iterable, Mapping, Sequence

from repo_onboarding.domain.entities import (
    AnalysisResult,
    AssessmentTask,
    ContentEntry,
    Hotspot,
    LanguageStat,
    ProjectStats,
    PullRequest,
)
from repo_onboarding.domain.value_objects import RepoRef

SUMMARY_HOTSPOT_COUNT = 5
TOP_LANGUAGE_COUNT = 3

# ── System instructions ─────────────────────────────────────────────────────

CHAT_SYSTEM_PROMPT = (
    "You are a codebase analysis AI that provides detailed, well-structured "
    "responses in markdown format. Always use proper markdown syntax and "
    "maintain a clear hierarchy in your responses."
)

CONVENTIONS_SYSTEM_PROMPT = (
    "You are a senior engineer who infers team conventions from pull request "
    "history. Always respond with valid JSON."
)

EVALUATION_SYSTEM_PROMPT = (
    "You are a codebase assessment AI that evaluates developers' solutions to "
    "coding tasks and provides actionable feedback. Always respond with a valid "
    "JSON object, without any markdown formatting or additional text."
)


def assessment_system_prompt(developer_type: str) -> str:
    return (
        "You are a codebase assessment AI that generates practical coding tasks "
        f"for new {developer_type} developers. Always respond with a valid JSON "
        "object, without any markdown formatting or additional text."
    )


# ── Shared formatting ───────────────────────────────────────────────────────


def format_language_stats(stats: Sequence[LanguageStat]) -> str:
    if not stats:
        return "- No language data reported"
    return "\n".join(f"- {s.name}: {s.percentage}%" for s in stats)


def format_project_stats(stats: ProjectStats) -> str:
    return (
        f"- Total Commits: {stats.commits}\n"
        f"- Pull Requests: {stats.pull_requests}\n"
        f"- Issues: {stats.issues}\n"
        f"- CI/CD Workflows: {stats.workflows}"
    )


def format_hotspots(hotspots: Sequence[Hotspot], limit: int = SUMMARY_HOTSPOT_COUNT) -> str:
    lines = []
    for h in hotspots[:limit]:
        line = f"- {h.file}: {h.changes} change(s), score {h.score:.2f}"
        if h.additions is not None and h.deletions is not None:
            line += f" (+{h.additions}/-{h.deletions})"
        lines.append(line)
    return "\n".join(lines)


def render_file_tree(entries: Iterable[ContentEntry]) -> str:
    """One path per line; directories carry a trailing slash."""
    return "\n".join(
        f"{entry.path}/" if entry.type == "dir" else entry.path for entry in entries
    )


def format_review_text(reviewed_pulls: Iterable[tuple[PullRequest, Sequence[str]]]) -> str:
    """Flatten pull requests and their review bodies into one text block."""
    blocks = []
    for pr, reviews in reviewed_pulls:
        review_lines = "\n".join(reviews)
        blocks.append(f"PR: {pr.title}\nDescription: {pr.body or ''}\nReviews: {review_lines}")
    return "\n\n".join(blocks)


def format_solution(solution: Mapping[str, str]) -> str:
    """Flatten ``{path: content}`` into ``"<path>:\\n<content>"`` blocks."""
    return "\n\n".join(f"{path}:\n{content}" for path, content in solution.items())


def _top_language_names(stats: Sequence[LanguageStat]) -> str:
    names = [s.name for s in stats[:TOP_LANGUAGE_COUNT]]
    return ", ".join(names) if names else "the primary languages"


# ── Summary & recommendations ───────────────────────────────────────────────


def build_summary_prompt(
    ref: RepoRef,
    role: str,
    language_stats: Sequence[LanguageStat],
    file_listing: str,
    project_stats: ProjectStats,
    hotspots: Sequence[Hotspot],
) -> str:
    sections = [
        f"As a {role}, analyze this GitHub repository:",
        f"Repository: {ref.full_name}",
        f"Languages:\n{format_language_stats(language_stats)}",
        f"Top-level files and directories:\n{file_listing or '(empty)'}",
        f"Project Activity:\n{format_project_stats(project_stats)}",
    ]
    if hotspots:
        sections.append(f"Frequently changed files:\n{format_hotspots(hotspots)}")
    sections.append(
        "Provide a comprehensive summary focusing on:\n"
        "1. Key components and architecture\n"
        "2. Development patterns and practices\n"
        "3. Areas that need attention (risk areas)\n"
        "4. Technology stack observations\n\n"
        "Format the response as a clear, structured summary."
    )
    return "\n\n".join(sections)


def build_recommendations_prompt(ref: RepoRef, role: str, summary: str) -> str:
    return (
        f"As a {role}, provide 3-5 specific recommendations for the repository "
        f"{ref.full_name} based on:\n"
        "1. Code organization\n"
        "2. Best practices\n"
        "3. Potential improvements\n"
        "4. Common pitfalls to avoid\n\n"
        f"Repository summary:\n{summary}\n\n"
        "Format EXACTLY as follows, with each recommendation on a new line starting with '- ':\n"
        "- First recommendation\n"
        "- Second recommendation\n"
        "- Third recommendation"
    )


# ── Chat ────────────────────────────────────────────────────────────────────


def build_chat_prompt(ref: RepoRef, role: str, file_tree: str, question: str) -> str:
    return f"""As a {role}, analyze this question about the codebase:
Repository: {ref.full_name}
File Structure:
{file_tree}

Question: {question}

Provide a detailed response in markdown format with the following structure:

# Analysis

## Impact Assessment
- [Detailed analysis of the potential impact]

## Affected Files
- [List of files that might be affected]
- [Explanation of how each file might be impacted]

## Implementation Guidelines
- [Step-by-step implementation approach]
- [Best practices to follow]
- [Code examples if relevant]

## Considerations & Risks
- [Potential risks and challenges]
- [Mitigation strategies]
- [Additional recommendations]

Format the response using proper markdown syntax including headers, lists,
code blocks and bold text. Make the response clear, well-structured, and easy to read."""


# ── Conventions ─────────────────────────────────────────────────────────────


def build_conventions_prompt(role: str, review_text: str) -> str:
    return f"""As a {role}, analyze these pull request reviews and identify team conventions and practices:

{review_text}

Identify and categorize the following:
1. Code style and formatting conventions
2. Review and approval processes
3. Testing requirements
4. Documentation standards
5. Branch naming and management
6. Commit message conventions
7. Any other notable practices

For each convention, provide:
- A clear description
- Examples from the reviews
- The source (which PR/review it came from)

Respond with a JSON object of the form {{"conventions": [...]}} where each item has these fields:
{{
  "category": string,
  "description": string,
  "examples": string[],
  "source": string
}}"""


# ── Assessment ──────────────────────────────────────────────────────────────


def build_assessment_prompt(analysis: AnalysisResult, developer_type: str) -> str:
    return f"""You are a codebase assessment AI for new {developer_type} developers onboarding to a company.
Analyze the following repository context and generate a practical coding assessment that tests their understanding of the codebase.

Repository Analysis:
{json.dumps(analysis.to_dict(), indent=2)}

Primary Languages Used:
{format_language_stats(analysis.language_stats)}

Project Activity:
{format_project_stats(analysis.project_stats)}

Generate a practical coding assessment that:
1. Focuses on the primary languages used in the project ({_top_language_names(analysis.language_stats)})
2. Tests understanding of the project's architecture and patterns
3. Involves modifying or extending existing functionality
4. Requires following established code conventions
5. Tests understanding of the testing practices (if present)
6. Considers the project's complexity level

Format the response as a JSON object with the following structure:
{{
  "task": {{
    "title": string,
    "description": string,
    "targetFiles": [{{
      "path": string,
      "currentContent": string,
      "expectedChanges": string
    }}],
    "requirements": string[],
    "hints": string[],
    "languageSpecificTips": {{
      "language": string,
      "tips": string[]
    }}[]
  }}
}}

IMPORTANT: Return ONLY the JSON object, without any markdown formatting or additional text."""


def build_evaluation_prompt(
    task: AssessmentTask, solution_text: str, analysis: AnalysisResult
) -> str:
    primary = analysis.language_stats[0].name if analysis.language_stats else "the primary language"
    return f"""You are a codebase assessment AI. Evaluate the following solution for a coding task:

Task:
{json.dumps(task_to_dict(task), indent=2)}

Submitted Solution:
{solution_text}

Repository Context:
{json.dumps(analysis.to_dict(), indent=2)}

Primary Languages:
{format_language_stats(analysis.language_stats)}

Evaluate the solution based on:
1. Correctness of implementation
2. Code quality and best practices
3. Language-specific best practices for {primary}
4. Integration with existing codebase
5. Adherence to project patterns
6. Test coverage (if applicable)
7. Performance considerations

If the solution leaves the target files unchanged, say so and score it accordingly.

Format the response as a JSON object with the following structure:
{{
  "score": number (0-100),
  "feedback": string,
  "roadmap": string[],
  "languageSpecificFeedback": {{
    "language": string,
    "feedback": string[]
  }}[]
}}"""


def task_to_dict(task: AssessmentTask) -> dict[str, object]:
    """Camel-cased mapping of a task, as shown to the model and the client."""
    data: dict[str, object] = {
        "title": task.title,
        "description": task.description,
        "targetFiles": [
            {
                "path": f.path,
                "currentContent": f.current_content,
                "expectedChanges": f.expected_changes,
            }
            for f in task.target_files
        ],
        "requirements": list(task.requirements),
        "hints": list(task.hints),
    }
    if task.language_specific_tips is not None:
        data["languageSpecificTips"] = [
            {"language": n.language, "tips": list(n.items)} for n in task.language_specific_tips
        ]
    return data
