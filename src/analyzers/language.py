"""
Language Profile Module.

Per-language conventions (source extensions, test naming, comment markers,
dependency manifests) and the structural analysis derived from a snapshot's
content listing. Everything here is pure and works on already-fetched data.
"""

from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from miners.models import ContentEntry, RepositorySnapshot


@dataclass(frozen=True)
class LanguageProfile:
    """
    Conventions of a programming language ecosystem.

    Attributes:
        extensions (Tuple[str, ...]): Source file extensions
        test_patterns (Tuple[str, ...]): Substrings identifying test files
        comment_prefixes (Tuple[str, ...]): Line prefixes marking a comment
        dependency_files (Tuple[str, ...]): Manifest file names
    """

    extensions: Tuple[str, ...]
    test_patterns: Tuple[str, ...]
    comment_prefixes: Tuple[str, ...]
    dependency_files: Tuple[str, ...] = ()


LANGUAGE_PROFILES = {
    "JavaScript": LanguageProfile(
        extensions=(".js", ".jsx", ".ts", ".tsx"),
        test_patterns=("test", "spec", ".test.", ".spec."),
        comment_prefixes=("//", "/*", "*/"),
        dependency_files=("package.json", "yarn.lock", "package-lock.json"),
    ),
    "TypeScript": LanguageProfile(
        extensions=(".ts", ".tsx"),
        test_patterns=("test", "spec", ".test.", ".spec."),
        comment_prefixes=("//", "/*", "*/"),
        dependency_files=("package.json", "tsconfig.json"),
    ),
    "Python": LanguageProfile(
        extensions=(".py", ".pyw"),
        test_patterns=("test_", "_test", "test.py", "spec.py"),
        comment_prefixes=("#", '"""', "'''"),
        dependency_files=("requirements.txt", "setup.py", "pyproject.toml", "Pipfile"),
    ),
    "Java": LanguageProfile(
        extensions=(".java", ".kt"),
        test_patterns=("Test", "test", "Spec", "spec"),
        comment_prefixes=("//", "/*", "*/", "/**"),
        dependency_files=("pom.xml", "build.gradle", "gradle.properties"),
    ),
    "Go": LanguageProfile(
        extensions=(".go",),
        test_patterns=("_test.go", "test_"),
        comment_prefixes=("//", "/*", "*/"),
        dependency_files=("go.mod", "go.sum"),
    ),
    "C#": LanguageProfile(
        extensions=(".cs", ".csproj"),
        test_patterns=("Test", "test", "Spec", "spec"),
        comment_prefixes=("//", "/*", "*/", "///"),
        dependency_files=(".csproj", "packages.config", "Directory.Build.props"),
    ),
    "Ruby": LanguageProfile(
        extensions=(".rb", ".erb"),
        test_patterns=("_spec.rb", "_test.rb", "spec_"),
        comment_prefixes=("#", "=begin", "=end"),
        dependency_files=("Gemfile", "Gemfile.lock", "gemspec"),
    ),
    "PHP": LanguageProfile(
        extensions=(".php",),
        test_patterns=("Test.php", "test_", "_test"),
        comment_prefixes=("//", "/*", "*/", "#"),
        dependency_files=("composer.json", "composer.lock"),
    ),
}

GENERIC_PROFILE = LanguageProfile(
    extensions=(".txt", ".md", ".yml", ".yaml", ".json", ".xml"),
    test_patterns=("test", "spec"),
    comment_prefixes=("#", "//", "/*", "*/"),
)

DOCUMENTATION_PATTERNS = (
    "readme",
    "docs",
    "documentation",
    "guide",
    "tutorial",
    "changelog",
    "contributing",
    "license",
    "code_of_conduct",
)

LOCK_FILES = (
    "package-lock.json",
    "yarn.lock",
    "gemfile.lock",
    "composer.lock",
    "go.sum",
    "poetry.lock",
    "pipfile.lock",
)


def get_profile(language: Optional[str]) -> LanguageProfile:
    """
    Look up the profile of a primary language.

    Args:
        language (Optional[str]): Primary language as reported by GitHub

    Returns:
        LanguageProfile: Matching profile, or the generic profile for unknown languages
    """
    if not language:
        return GENERIC_PROFILE
    return LANGUAGE_PROFILES.get(language, GENERIC_PROFILE)


def is_comment_line(line: str, profile: LanguageProfile) -> bool:
    """Check whether a stripped source line is a comment for the given profile."""
    if not line:
        return False
    for prefix in profile.comment_prefixes:
        if prefix in ("/*", "*/"):
            if "/*" in line or "*/" in line:
                return True
        elif line.startswith(prefix):
            return True
    return False


@dataclass(frozen=True)
class StructureAnalysis:
    """
    Structural facts derived from a repository content listing.

    Attributes:
        test_files (List[str]): Paths of files that look like tests
        documentation_files (List[str]): Paths of documentation files
        folders (List[str]): Names of directories
        has_package_manager (bool): A dependency manifest is present
        has_lock_file (bool): A dependency lock file is present
        file_count (int): Number of file entries
        average_file_size (float): Mean size over file entries, 0 without files
    """

    test_files: List[str] = field(default_factory=list)
    documentation_files: List[str] = field(default_factory=list)
    folders: List[str] = field(default_factory=list)
    has_package_manager: bool = False
    has_lock_file: bool = False
    file_count: int = 0
    average_file_size: float = 0.0


def _files(contents: List[ContentEntry]) -> List[ContentEntry]:
    return [item for item in contents if item.type == "file"]


def find_test_files(contents: List[ContentEntry], profile: LanguageProfile) -> List[str]:
    """Return paths of files matching the profile's test patterns or living under a test directory."""
    test_files = []
    patterns = [pattern.lower() for pattern in profile.test_patterns]
    for item in _files(contents):
        name = item.name.lower()
        path = item.path.lower()
        matches_pattern = any(pattern in name or pattern in path for pattern in patterns)
        in_test_dir = "test" in path or "spec" in path
        if matches_pattern or in_test_dir:
            test_files.append(item.path)
    return test_files


def find_documentation_files(contents: List[ContentEntry]) -> List[str]:
    """Return paths of files that look like documentation."""
    doc_files = []
    for item in _files(contents):
        name = item.name.lower()
        path = item.path.lower()
        if any(pattern in name or pattern in path for pattern in DOCUMENTATION_PATTERNS):
            doc_files.append(item.path)
    return doc_files


def analyze_structure(snapshot: RepositorySnapshot) -> StructureAnalysis:
    """
    Derive the structural analysis of a snapshot.

    Args:
        snapshot (RepositorySnapshot): Repository snapshot

    Returns:
        StructureAnalysis: Test files, documentation, folders and manifest facts
    """
    profile = get_profile(snapshot.language)
    contents = snapshot.contents
    files = _files(contents)
    manifests = [manifest.lower() for manifest in profile.dependency_files]

    return StructureAnalysis(
        test_files=find_test_files(contents, profile),
        documentation_files=find_documentation_files(contents),
        folders=[item.name for item in contents if item.type == "dir"],
        has_package_manager=any(
            manifest in item.name.lower() for item in files for manifest in manifests
        ),
        has_lock_file=any(
            lock_file in item.name.lower() for item in files for lock_file in LOCK_FILES
        ),
        file_count=len(files),
        average_file_size=(
            sum(item.size for item in files) / len(files) if files else 0.0
        ),
    )
