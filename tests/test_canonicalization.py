from pathlib import Path

from recordpack.core import (
    clear_package_root_cache,
    find_package_root,
    stabilize_path,
    stabilize_type_tag,
)
from recordpack.export import Exporter


def _make_project(root: Path, name: str = "demo-project") -> Path:
    project = root / "project"
    (project / "src" / "pkg").mkdir(parents=True)
    (project / "pyproject.toml").write_text(f'[project]\nname = "{name}"\n', encoding="utf-8")
    module = project / "src" / "pkg" / "module.py"
    module.write_text("VALUE = 1\n", encoding="utf-8")
    return project


def test_file_path_is_rewritten_relative_to_package_root(tmp_path: Path) -> None:
    project = _make_project(tmp_path)

    stabilized = stabilize_path(str(project / "src" / "pkg" / "module.py"))

    assert stabilized == "[demo-project]/src/pkg/module.py"


def test_directory_paths_keep_trailing_slash(tmp_path: Path) -> None:
    project = _make_project(tmp_path)

    assert stabilize_path(str(project / "src")) == "[demo-project]/src"
    assert stabilize_path(f"{project / 'src'}/") == "[demo-project]/src/"


def test_missing_file_under_package_is_still_stabilized(tmp_path: Path) -> None:
    project = _make_project(tmp_path)

    stabilized = stabilize_path(str(project / "src" / "pkg" / "deleted.py"))

    assert stabilized == "[demo-project]/src/pkg/deleted.py"


def test_poetry_name_and_directory_name_fallbacks(tmp_path: Path) -> None:
    poetry = tmp_path / "poetry-based"
    (poetry / "lib").mkdir(parents=True)
    (poetry / "pyproject.toml").write_text('[tool.poetry]\nname = "poetic"\n', encoding="utf-8")
    legacy = tmp_path / "legacy-based"
    (legacy / "lib").mkdir(parents=True)
    (legacy / "setup.py").write_text("", encoding="utf-8")

    assert stabilize_path(str(poetry / "lib" / "a.py")) == "[poetic]/lib/a.py"
    assert stabilize_path(str(legacy / "lib" / "a.py")) == "[legacy-based]/lib/a.py"


def test_non_paths_and_short_paths_are_unchanged() -> None:
    assert stabilize_path("relative/path/to/file.py") == "relative/path/to/file.py"
    assert stabilize_path("/tmp/x") == "/tmp/x"
    assert stabilize_path("hello world") == "hello world"
    assert stabilize_path("/multi/line\n/text/value") == "/multi/line\n/text/value"


def test_find_package_root_walks_parents(tmp_path: Path) -> None:
    project = _make_project(tmp_path)

    assert find_package_root(project / "src" / "pkg") == project.resolve()


def test_type_tag_line_suffix_is_replaced_with_wildcard() -> None:
    assert stabilize_type_tag("Widget@/src/app.py:42$1f") == "Widget@/src/app.py:**"
    assert stabilize_type_tag("Widget@/src/app.py:42") == "Widget@/src/app.py:**"
    assert stabilize_type_tag("package.module.Widget") == "package.module.Widget"


def test_exporter_stabilizes_strings_unless_disabled(tmp_path: Path) -> None:
    project = _make_project(tmp_path)
    raw_path = str(project / "src" / "pkg" / "module.py")

    assert Exporter().export({"file": raw_path}) == {"file": "[demo-project]/src/pkg/module.py"}
    assert Exporter().with_stable_paths(False).export({"file": raw_path}) == {"file": raw_path}


def test_exporter_sees_manifests_created_after_an_earlier_export(tmp_path: Path) -> None:
    project = tmp_path / "late-project"
    (project / "src").mkdir(parents=True)
    raw_path = str(project / "src" / "module.py")

    assert Exporter().export(raw_path) == raw_path

    (project / "pyproject.toml").write_text('[project]\nname = "late"\n', encoding="utf-8")

    assert Exporter().export(raw_path) == "[late]/src/module.py"


def test_package_root_cache_can_be_cleared(tmp_path: Path) -> None:
    project = tmp_path / "removed-project"
    (project / "lib").mkdir(parents=True)
    manifest = project / "setup.py"
    manifest.write_text("", encoding="utf-8")
    raw_path = str(project / "lib" / "a.py")

    assert stabilize_path(raw_path) == "[removed-project]/lib/a.py"

    manifest.unlink()
    clear_package_root_cache()

    assert stabilize_path(raw_path) == raw_path
