"""Tests for the end-to-end build pipeline."""

import tempfile
from pathlib import Path

import pytest

from registry.errors import EmptyCommandSetError, ExtractionError, SourceNotFoundError
from scanner.builder import build, build_report, collect_commands


MAIN_RS = """\
fn main() {
    tauri::Builder::default()
        .invoke_handler(tauri::generate_handler![get_weather, get_config])
        .run(tauri::generate_context!())
        .expect("error while running tauri application");
}

#[tauri::command]
fn get_weather() -> String {
    "sunny".to_string()
}
// or
use tauri::command;
#[command]
fn get_config() -> String {
    "config".to_string()
}
"""

EXPECTED = (
    "import * as tauri from '@tauri-apps/api/tauri';\n"
    "declare module '@tauri-apps/api' {\n"
    "    type Commands = \n"
    "          'get_weather'\n"
    "        | 'get_config';\n"
    "\n"
    "    function invoke<T>(cmd: Commands, args?: InvokeArgs): Promise<T>;\n"
    "}\n"
)


def _project(root: Path, files: dict) -> Path:
    for relative, text in files.items():
        path = root / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8")
    return root.resolve()


class TestCollectCommands:
    """Tests for per-file extraction and merging."""

    def test_first_file_wins(self):
        """Test that a name shared by two files keeps its first position."""
        with tempfile.TemporaryDirectory() as tmpdir:
            root = _project(Path(tmpdir), {
                "a.rs": "#[command] fn alpha() {}\n#[command] fn shared() {}",
                "b.rs": "#[tauri::command] fn shared() {}\n#[command] fn beta() {}",
            })

            commands = collect_commands([root / "a.rs", root / "b.rs"])

            assert commands.names == ["alpha", "shared", "beta"]
            assert commands.origin("shared").path == root / "a.rs"

    def test_workers_keep_file_order(self):
        """Test that threaded extraction merges in file order."""
        with tempfile.TemporaryDirectory() as tmpdir:
            root = Path(tmpdir)
            files = {f"m{i:02d}.rs": f"#[command] fn cmd_{i:02d}() {{}}\n" for i in range(20)}
            _project(root, files)
            paths = [root / name for name in sorted(files)]

            sequential = collect_commands(paths)
            threaded = collect_commands(paths, workers=4)

            assert threaded == sequential
            assert threaded.names == [f"cmd_{i:02d}" for i in range(20)]


class TestBuild:
    """Tests for the build operation."""

    def test_reference_example(self):
        """Test the documented main.rs example."""
        with tempfile.TemporaryDirectory() as tmpdir:
            root = _project(Path(tmpdir), {"src/main.rs": MAIN_RS})

            path = build("ui", root=root)

            assert path == root / "ui" / "invoke.d.ts"
            assert path.read_text(encoding="utf-8") == EXPECTED

    def test_relative_output_uses_manifest_dir(self, monkeypatch):
        """Test that CARGO_MANIFEST_DIR locates the project like a build script."""
        with tempfile.TemporaryDirectory() as tmpdir:
            root = _project(Path(tmpdir), {"src/main.rs": MAIN_RS})
            monkeypatch.setenv("CARGO_MANIFEST_DIR", str(root))

            path = build("ui")

            assert path == root.resolve() / "ui" / "invoke.d.ts"
            assert path.read_text(encoding="utf-8") == EXPECTED

    def test_discovery_order_across_files(self):
        """Test that commands follow lexicographic file order."""
        with tempfile.TemporaryDirectory() as tmpdir:
            root = _project(Path(tmpdir), {
                "src/main.rs": "#[command] fn from_main() {}",
                "src/api/users.rs": "#[command] fn from_users() {}",
                "src/api/auth.rs": "#[command] fn from_auth() {}",
            })

            result = build_report("ui", root=root)

            assert result.commands.names == ["from_auth", "from_users", "from_main"]

    def test_explicit_sources(self):
        """Test scanning only an explicit file list, in the given order."""
        with tempfile.TemporaryDirectory() as tmpdir:
            root = _project(Path(tmpdir), {
                "src/z.rs": "#[command] fn zed() {}",
                "src/a.rs": "#[command] fn ay() {}",
                "src/ignored.rs": "#[command] fn ignored() {}",
            })

            result = build_report("ui", sources=[root / "src/z.rs", root / "src/a.rs"], root=root)

            assert result.commands.names == ["zed", "ay"]
            assert result.files == [root / "src/z.rs", root / "src/a.rs"]

    def test_target_directory_is_skipped(self):
        """Test that generated code under target/ is not scanned."""
        with tempfile.TemporaryDirectory() as tmpdir:
            root = _project(Path(tmpdir), {
                "src/main.rs": "#[command] fn real() {}",
                "target/debug/build/gen.rs": "#[command] fn generated() {}",
            })

            result = build_report("ui", root=root)

            assert result.commands.names == ["real"]

    def test_idempotent(self):
        """Test that two builds produce byte-identical files."""
        with tempfile.TemporaryDirectory() as tmpdir:
            root = _project(Path(tmpdir), {
                "src/main.rs": MAIN_RS,
                "src/extra.rs": "#[command] fn extra() {}",
            })

            first = build("ui", root=root).read_bytes()
            second = build("ui", root=root).read_bytes()

            assert first == second

    def test_rename_rewrites_union(self):
        """Test that renaming a command replaces the old name entirely."""
        with tempfile.TemporaryDirectory() as tmpdir:
            root = _project(Path(tmpdir), {"src/main.rs": MAIN_RS})
            build("ui", root=root)

            (root / "src/main.rs").write_text(MAIN_RS.replace("get_config", "load_config"), encoding="utf-8")
            content = build("ui", root=root).read_text(encoding="utf-8")

            assert "'load_config'" in content
            assert "get_config" not in content
            assert content == EXPECTED.replace("get_config", "load_config")

    def test_no_markers_uses_empty_policy(self):
        """Test the empty tree behaviour."""
        with tempfile.TemporaryDirectory() as tmpdir:
            root = _project(Path(tmpdir), {"src/main.rs": "fn main() {}"})

            result = build_report("ui", root=root)

            assert len(result.commands) == 0
            assert "          never;\n" in result.path.read_text(encoding="utf-8")

    def test_no_markers_strict_writes_nothing(self):
        """Test that the strict empty policy fails without output."""
        with tempfile.TemporaryDirectory() as tmpdir:
            root = _project(Path(tmpdir), {"src/main.rs": "fn main() {}"})

            with pytest.raises(EmptyCommandSetError):
                build("ui", root=root, empty_policy="error")

            assert not (root / "ui").exists()

    def test_extraction_error_keeps_previous_file(self):
        """Test that a failed run does not touch an existing declaration."""
        with tempfile.TemporaryDirectory() as tmpdir:
            root = _project(Path(tmpdir), {"src/main.rs": MAIN_RS})
            path = build("ui", root=root)

            (root / "src/broken.rs").write_text("#[tauri::command]\nstruct Oops;", encoding="utf-8")

            with pytest.raises(ExtractionError):
                build("ui", root=root)

            assert path.read_text(encoding="utf-8") == EXPECTED

    def test_missing_root(self):
        """Test that a missing source root fails."""
        with tempfile.TemporaryDirectory() as tmpdir:
            missing = Path(tmpdir) / "missing"

            with pytest.raises(SourceNotFoundError):
                build("ui", root=missing)

            assert not (missing / "ui").exists()

    def test_dry_run(self):
        """Test rendering without writing."""
        with tempfile.TemporaryDirectory() as tmpdir:
            root = _project(Path(tmpdir), {"src/main.rs": MAIN_RS})

            result = build_report("ui", root=root, write=False)

            assert result.commands.names == ["get_weather", "get_config"]
            assert not result.path.exists()
