"""
Insight prompt construction.
"""

from miners.models import RepositorySnapshot

SYSTEM_PROMPT = """You are a Staff Software Engineer reviewing open source repositories.
You will be given a short description of a repository and must answer with a
single JSON object and nothing else. Do not add fields that were not requested."""

RESPONSE_STRUCTURE = """{
    "summary": "2-3 sentence overview of the repository",
    "strengths": ["strength 1", "strength 2", "strength 3"],
    "improvements": ["improvement 1", "improvement 2", "improvement 3"],
    "recommendation": "single most important recommendation",
    "collaboration": "assessment of the team collaboration pattern",
    "activity": "active | moderate | low",
    "quality": <integer between 1 and 100>
}"""


def build_insight_prompt(snapshot: RepositorySnapshot) -> str:
    """
    Build the user prompt describing a repository.

    Includes at most three recent commit messages, truncated to 50
    characters, and at most three contributor logins.

    Args:
        snapshot (RepositorySnapshot): Repository snapshot

    Returns:
        str: Prompt text
    """
    commits = "\n".join(
        f"- {commit.message.splitlines()[0][:50] if commit.message else 'No message'}"
        for commit in snapshot.commits[:3]
    ) or "- No recent commits"
    contributors = ", ".join(
        contributor.login for contributor in snapshot.contributors[:3]
    ) or "None"

    return f"""Analyze this GitHub repository and provide insights.

Repository: {snapshot.name or snapshot.full_name}
Language: {snapshot.language or 'Unknown'}
Stars: {snapshot.stars}
Forks: {snapshot.forks}
Last updated: {snapshot.updated_at.date().isoformat()}

Recent commits:
{commits}

Top contributors: {contributors}

Respond with JSON in exactly this structure:
{RESPONSE_STRUCTURE}
"""
