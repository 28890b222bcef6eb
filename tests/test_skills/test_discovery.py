from itertools import combinations
from pathlib import Path

from skillx.discovery import (
    SHEBANG,
    SUPPORTED_EXTENSIONS,
    ScriptMatch,
    find_script_for_base,
    is_executable_with_shebang,
    list_available_commands,
)


def _write_executable(path: Path, content: str = "#!/usr/bin/env bash\necho hi\n") -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
    path.chmod(0o755)
    return path


def test_find_script_for_base_prefers_typescript_over_javascript(tmp_path: Path):
    base = tmp_path / "main"
    (tmp_path / "main.js").write_text("console.log('js');\n", encoding="utf-8")
    (tmp_path / "main.ts").write_text("console.log('ts');\n", encoding="utf-8")

    assert find_script_for_base(base) == ScriptMatch(path=tmp_path / "main.ts", extension=".ts")


def test_find_script_for_base_follows_canonical_order_for_every_pair(tmp_path: Path):
    for index, (higher, lower) in enumerate(combinations(SUPPORTED_EXTENSIONS, 2)):
        case_dir = tmp_path / f"case-{index}"
        case_dir.mkdir()
        (case_dir / f"run{lower}").write_text("x\n", encoding="utf-8")
        (case_dir / f"run{higher}").write_text("x\n", encoding="utf-8")

        match = find_script_for_base(case_dir / "run")

        assert match is not None
        assert match.extension == higher


def test_find_script_for_base_falls_back_to_shebang_executable(tmp_path: Path):
    script = _write_executable(tmp_path / "deploy")

    assert find_script_for_base(tmp_path / "deploy") == ScriptMatch(path=script, extension=SHEBANG)


def test_find_script_for_base_rejects_non_executable_or_headerless_files(tmp_path: Path):
    plain = tmp_path / "plain"
    plain.write_text("#!/bin/sh\necho hi\n", encoding="utf-8")
    plain.chmod(0o644)
    _write_executable(tmp_path / "binary", "echo no header\n")

    assert find_script_for_base(plain) is None
    assert find_script_for_base(tmp_path / "binary") is None
    assert find_script_for_base(tmp_path / "missing") is None


def test_find_script_for_base_ignores_directories_named_like_scripts(tmp_path: Path):
    (tmp_path / "main.ts").mkdir()
    (tmp_path / "main.py").write_text("print('hi')\n", encoding="utf-8")

    match = find_script_for_base(tmp_path / "main")

    assert match is not None
    assert match.extension == ".py"


def test_list_available_commands_excludes_main_and_sorts(tmp_path: Path):
    scripts_dir = tmp_path / "scripts"
    scripts_dir.mkdir()
    (scripts_dir / "main.ts").write_text("console.log('main');\n", encoding="utf-8")
    (scripts_dir / "sync.ts").write_text("console.log('sync');\n", encoding="utf-8")
    (scripts_dir / "check.py").write_text("print('check')\n", encoding="utf-8")
    (scripts_dir / "notes.txt").write_text("not a command\n", encoding="utf-8")
    _write_executable(scripts_dir / "deploy")
    _write_executable(scripts_dir / "main")

    assert list_available_commands(scripts_dir) == ["check", "deploy", "sync"]


def test_list_available_commands_ignores_subdirectories_and_collapses_duplicates(tmp_path: Path):
    scripts_dir = tmp_path / "scripts"
    (scripts_dir / "nested.ts").mkdir(parents=True)
    (scripts_dir / "deploy.sh").write_text("echo deploy\n", encoding="utf-8")
    _write_executable(scripts_dir / "deploy")

    assert list_available_commands(scripts_dir) == ["deploy"]


def test_list_available_commands_returns_empty_for_missing_directory(tmp_path: Path):
    assert list_available_commands(tmp_path / "nope") == []


def test_is_executable_with_shebang_is_false_for_directories(tmp_path: Path):
    assert is_executable_with_shebang(tmp_path) is False
