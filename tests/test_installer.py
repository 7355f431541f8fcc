import json
import subprocess
import tempfile
import unittest
from pathlib import Path
from unittest.mock import patch

from byteshard_assets.errors import PackageManagerError
from byteshard_assets.installer import install_assets, install_command, run_package_manager
from byteshard_assets.manifest import ReconcileResult

from ._helpers import RecordingConsole


def _completed(returncode: int = 0, stdout: str = "", stderr: str = "") -> subprocess.CompletedProcess:
    return subprocess.CompletedProcess(args=[], returncode=returncode, stdout=stdout, stderr=stderr)


class TestInstallCommand(unittest.TestCase):
    def test_log_level_follows_verbosity(self) -> None:
        self.assertEqual(
            install_command("npm", verbose=False),
            ["npm", "install", "--no-audit", "--save-exact", "--no-optional", "--loglevel", "error"],
        )
        self.assertEqual(install_command("npm", verbose=True)[-1], "info")


class TestRunPackageManager(unittest.TestCase):
    def test_missing_executable_only_warns(self) -> None:
        console = RecordingConsole()
        with (
            patch("byteshard_assets.installer.shutil.which", return_value=None),
            patch("byteshard_assets.installer.subprocess.run") as mock_run,
        ):
            ran = run_package_manager(console, cwd=Path("."))

        self.assertFalse(ran)
        mock_run.assert_not_called()
        self.assertEqual(console.err, ['warning: npm is not installed, please run "npm install" on your own'])

    def test_runs_install_with_timeout_in_cwd(self) -> None:
        console = RecordingConsole()
        with (
            patch("byteshard_assets.installer.shutil.which", return_value="/usr/bin/npm"),
            patch("byteshard_assets.installer.subprocess.run", return_value=_completed(stdout="added 3 packages\n")) as mock_run,
        ):
            ran = run_package_manager(console, cwd=Path("/srv/app"), timeout_s=12)

        self.assertTrue(ran)
        self.assertEqual(mock_run.call_args.args[0], install_command("npm", verbose=False))
        self.assertEqual(mock_run.call_args.kwargs["cwd"], "/srv/app")
        self.assertEqual(mock_run.call_args.kwargs["timeout"], 12)
        self.assertEqual(console.out, [" ".join(install_command("npm", verbose=False))])

    def test_verbose_forwards_output_lines(self) -> None:
        console = RecordingConsole(verbose=True)
        with (
            patch("byteshard_assets.installer.shutil.which", return_value="/usr/bin/npm"),
            patch(
                "byteshard_assets.installer.subprocess.run",
                return_value=_completed(stdout="line one\nline two\n", stderr="npm info ok\n"),
            ),
        ):
            run_package_manager(console, cwd=Path("."))

        self.assertEqual(console.out[1:], ["line one", "line two"])
        self.assertEqual(console.err, ["npm info ok"])

    def test_non_zero_exit_raises(self) -> None:
        console = RecordingConsole()
        with (
            patch("byteshard_assets.installer.shutil.which", return_value="/usr/bin/npm"),
            patch("byteshard_assets.installer.subprocess.run", return_value=_completed(returncode=1, stderr="ERESOLVE\n")),
        ):
            with self.assertRaises(PackageManagerError) as ctx:
                run_package_manager(console, cwd=Path("."))

        self.assertIsInstance(ctx.exception, RuntimeError)
        self.assertIn("package-lock.json", str(ctx.exception))
        self.assertEqual(console.err, ["ERESOLVE"])

    def test_timeout_raises(self) -> None:
        console = RecordingConsole()
        with (
            patch("byteshard_assets.installer.shutil.which", return_value="/usr/bin/npm"),
            patch(
                "byteshard_assets.installer.subprocess.run",
                side_effect=subprocess.TimeoutExpired(cmd=["npm"], timeout=60),
            ),
        ):
            with self.assertRaises(PackageManagerError) as ctx:
                run_package_manager(console, cwd=Path("."))

        self.assertIn("timed out", str(ctx.exception))


class TestInstallAssets(unittest.TestCase):
    def test_unchanged_result_is_a_noop(self) -> None:
        console = RecordingConsole()
        result = ReconcileResult(manifest={"dependencies": {"a": "1.0"}}, changed=False, notifications=())
        with tempfile.TemporaryDirectory() as td:
            root = Path(td)
            (root / "package-lock.json").write_text("{}", encoding="utf-8")
            with patch("byteshard_assets.installer.subprocess.run") as mock_run:
                wrote = install_assets(
                    result, console, manifest_path=root / "package.json", lock_path=root / "package-lock.json"
                )

            self.assertFalse(wrote)
            self.assertFalse((root / "package.json").exists())
            self.assertTrue((root / "package-lock.json").exists())
            mock_run.assert_not_called()

    def test_changed_result_writes_manifest_and_drops_lock(self) -> None:
        console = RecordingConsole()
        result = ReconcileResult(
            manifest={"dependencies": {"a": "1.0"}, "private": True},
            changed=True,
            notifications=("add field a with version 1.0 to dependencies in package.json",),
        )
        with tempfile.TemporaryDirectory() as td:
            root = Path(td)
            (root / "package-lock.json").write_text("{}", encoding="utf-8")
            with (
                patch("byteshard_assets.installer.shutil.which", return_value="/usr/bin/npm"),
                patch("byteshard_assets.installer.subprocess.run", return_value=_completed()) as mock_run,
            ):
                wrote = install_assets(
                    result, console, manifest_path=root / "package.json", lock_path=root / "package-lock.json"
                )

            self.assertTrue(wrote)
            self.assertEqual(json.loads((root / "package.json").read_text(encoding="utf-8"))["dependencies"], {"a": "1.0"})
            self.assertFalse((root / "package-lock.json").exists())
            self.assertEqual(mock_run.call_args.kwargs["cwd"], str(root))
        self.assertEqual(console.out[0], "add field a with version 1.0 to dependencies in package.json")

    def test_missing_lock_file_is_not_an_error(self) -> None:
        console = RecordingConsole()
        result = ReconcileResult(manifest={"dependencies": {}}, changed=True, notifications=())
        with tempfile.TemporaryDirectory() as td:
            root = Path(td)
            with patch("byteshard_assets.installer.shutil.which", return_value=None):
                wrote = install_assets(
                    result, console, manifest_path=root / "package.json", lock_path=root / "package-lock.json"
                )

            self.assertTrue(wrote)
            self.assertTrue((root / "package.json").exists())


if __name__ == "__main__":
    unittest.main()
