import json

from miners.dependencies import extract_dependencies
from miners.file_tags import community_files, performance_files, security_files


def test_package_json():
    content = json.dumps(
        {
            "dependencies": {"react": "^18.0.0", "express": "^4.18.0"},
            "devDependencies": {"jest": "^29.0.0"},
        }
    )
    assert extract_dependencies(content, "package.json") == ["react", "express", "jest"]


def test_requirements_txt():
    content = """
        # web
        flask==2.3.0
        pytest==7.4.0
        requests>=2.28.0
        uvicorn[standard]
        -r dev-requirements.txt
    """
    assert extract_dependencies(content, "requirements.txt") == [
        "flask",
        "pytest",
        "requests",
        "uvicorn",
    ]


def test_pom_xml():
    content = """
    <project>
      <dependencies>
        <dependency><groupId>org.springframework</groupId><artifactId>spring-core</artifactId></dependency>
        <dependency><groupId>junit</groupId><artifactId>junit</artifactId></dependency>
      </dependencies>
    </project>
    """
    assert extract_dependencies(content, "pom.xml") == ["spring-core", "junit"]


def test_go_mod():
    content = (
        "module example.com/app\n\n"
        "require (\n"
        "\tgithub.com/gin-gonic/gin v1.9.0\n"
        "\tgithub.com/stretchr/testify v1.8.0 // indirect\n"
        ")\n"
    )
    assert extract_dependencies(content, "go.mod") == ["github.com/gin-gonic/gin"]


def test_unknown_manifest_and_invalid_content():
    assert extract_dependencies("anything", "Cargo.toml") == []
    assert extract_dependencies("{not json", "package.json") == []


def test_file_tags():
    paths = [
        "SECURITY.md",
        "LICENSE",
        "src/cache.py",
        "db/migrations",
        "CONTRIBUTING.md",
        ".github/ISSUE_TEMPLATE/bug.md",
        "main.py",
    ]

    assert security_files(paths) == ["SECURITY.md", "LICENSE"]
    assert performance_files(paths) == ["src/cache.py", "db/migrations"]
    assert community_files(paths) == ["CONTRIBUTING.md", ".github/ISSUE_TEMPLATE/bug.md"]
