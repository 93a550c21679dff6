import pytest

from argus.detect import detect, detect_icon, detect_language


@pytest.mark.parametrize(
    "marker, expected",
    [
        ("go.mod", "go"),
        ("Cargo.toml", "rust"),
        ("package.json", "node"),
        ("tsconfig.json", "typescript"),
        ("Gemfile", "ruby"),
        ("requirements.txt", "python"),
        ("setup.py", "python"),
        ("pyproject.toml", "python"),
        ("pom.xml", "java"),
        ("build.gradle", "java"),
        ("mix.exs", "elixir"),
    ],
)
def test_detect_language(tmp_path, marker, expected):
    (tmp_path / marker).write_bytes(b"")
    assert detect_language(tmp_path) == expected


def test_detect_language_empty(tmp_path):
    assert detect_language(tmp_path) == ""


def test_detect_language_priority(tmp_path):
    (tmp_path / "go.mod").write_bytes(b"")
    (tmp_path / "package.json").write_bytes(b"")
    assert detect_language(tmp_path) == "go"


def test_detect_icon(tmp_path):
    (tmp_path / "go.mod").write_bytes(b"")
    assert detect_icon(tmp_path) == "\ue627"


def test_detect_icon_fallback(tmp_path):
    assert detect_icon(tmp_path) == "\uf115"


def test_detect_icon_git(tmp_path):
    (tmp_path / ".git").mkdir()
    assert detect(tmp_path) == ("\ue725", "")


def test_detect_accepts_str_path(tmp_path):
    (tmp_path / "Cargo.toml").write_bytes(b"")
    assert detect(str(tmp_path)) == ("\ue7a8", "rust")