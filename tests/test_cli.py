"""
Tests for CLI entry points.

Every test points ASTRO_DATA_FILE and ASTRO_LOG_DIR at a temporary
directory so real user data and logs are never touched.
"""

import io
import json
import logging
import os
import tempfile
import unittest
from contextlib import redirect_stderr, redirect_stdout
from pathlib import Path
from unittest import mock

from astroschedule import config, factory
from astroschedule.cli import main
from astroschedule.manager import reset_manager


class TestCLI(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.dir = Path(self._tmp.name)
        self.data_file = self.dir / "schedule.json"
        env = {
            "ASTRO_DATA_FILE": str(self.data_file),
            "ASTRO_LOG_DIR": str(self.dir / "logs"),
            "ASTRO_USE_COLORS": "false",
        }
        self._env = mock.patch.dict(os.environ, env)
        self._env.start()
        config.reload_settings()
        factory.reset_counter()
        reset_manager()

    def tearDown(self) -> None:
        root = logging.getLogger()
        for h in list(root.handlers):
            root.removeHandler(h)
            h.close()
        self._env.stop()
        config.reload_settings()
        self._tmp.cleanup()

    def run_cli(self, *argv: str) -> tuple[int, str]:
        out = io.StringIO()
        with redirect_stdout(out), redirect_stderr(io.StringIO()):
            with self.assertRaises(SystemExit) as ctx:
                main(["--quiet", *argv])
        return ctx.exception.code, out.getvalue()

    def stored(self) -> list:
        return json.loads(self.data_file.read_text(encoding="utf-8"))

    def test_add_saves_and_list_prints(self) -> None:
        code, _ = self.run_cli("add", "Morning Exercise", "07:00", "08:00", "--priority", "high")
        self.assertEqual(code, 0)
        self.assertEqual(self.stored()[0]["priority"], "High")

        code, out = self.run_cli("list")
        self.assertEqual(code, 0)
        self.assertIn("1. 07:00-08:00 | Morning Exercise | High | pending", out)

    def test_save_after_add_is_not_audited_as_export(self) -> None:
        with self.assertLogs("astroschedule.audit", level="INFO") as cm:
            code, _ = self.run_cli("add", "Briefing", "09:00", "10:00")
        self.assertEqual(code, 0)
        self.assertEqual(len(self.stored()), 1)
        audit = "\n".join(cm.output)
        self.assertIn("TASK_ADDED", audit)
        self.assertNotIn("SCHEDULE_EXPORTED", audit)

    def test_export_command_is_audited(self) -> None:
        self.run_cli("add", "Briefing", "09:00", "10:00")
        with self.assertLogs("astroschedule.audit", level="INFO") as cm:
            self.run_cli("export", str(self.dir / "backup.json"))
        self.assertIn("SCHEDULE_EXPORTED", "\n".join(cm.output))

    def test_list_empty(self) -> None:
        code, out = self.run_cli("list")
        self.assertEqual(code, 0)
        self.assertIn("No tasks scheduled.", out)

    def test_conflicting_add_exits_one_and_keeps_file(self) -> None:
        self.run_cli("add", "Briefing", "09:00", "10:00")
        code, out = self.run_cli("add", "Call", "09:30", "10:30")
        self.assertEqual(code, 1)
        self.assertIn("[ERROR]", out)
        self.assertEqual([r["description"] for r in self.stored()], ["Briefing"])

    def test_invalid_time_exits_one(self) -> None:
        code, _ = self.run_cli("add", "Broken", "25:00", "26:00")
        self.assertEqual(code, 1)
        self.assertFalse(self.data_file.exists())

    def test_remove_missing_is_not_an_error(self) -> None:
        code, out = self.run_cli("remove", "Ghost")
        self.assertEqual(code, 0)
        self.assertIn("Not found: Ghost", out)

    def test_edit_complete_and_reopen(self) -> None:
        self.run_cli("add", "Lab Work", "13:00", "14:00", "-p", "low")
        code, _ = self.run_cli("edit", "lab work", "--start", "13:30", "--end", "15:00")
        self.assertEqual(code, 0)
        rec = self.stored()[0]
        self.assertEqual((rec["startTime"], rec["endTime"]), ("13:30", "15:00"))
        self.assertIsNotNone(rec["updatedAt"])

        self.run_cli("complete", "Lab Work")
        self.assertTrue(self.stored()[0]["completed"])
        code, out = self.run_cli("list", "--completed")
        self.assertIn("Lab Work", out)

        self.run_cli("reopen", "Lab Work")
        self.assertFalse(self.stored()[0]["completed"])

    def test_edit_without_changes_exits_one(self) -> None:
        self.run_cli("add", "Lab Work", "13:00", "14:00")
        code, _ = self.run_cli("edit", "Lab Work")
        self.assertEqual(code, 1)

    def test_edit_missing_task_exits_one(self) -> None:
        code, out = self.run_cli("edit", "Ghost", "--priority", "High")
        self.assertEqual(code, 1)
        self.assertIn("[ERROR]", out)

    def test_list_window_requires_both_ends(self) -> None:
        code, _ = self.run_cli("list", "--from", "09:00")
        self.assertEqual(code, 1)

    def test_list_window_filters(self) -> None:
        self.run_cli("add", "Early", "06:00", "07:00")
        self.run_cli("add", "Late", "20:00", "21:00")
        code, out = self.run_cli("list", "--from", "05:00", "--to", "08:00")
        self.assertEqual(code, 0)
        self.assertIn("Early", out)
        self.assertNotIn("Late", out)

    def test_export_and_import(self) -> None:
        self.run_cli("add", "Docking", "10:00", "11:00")
        backup = self.dir / "backup.json"
        code, out = self.run_cli("export", str(backup))
        self.assertEqual(code, 0)
        self.assertIn("Exported 1 tasks", out)

        self.run_cli("clear")
        self.assertEqual(self.stored(), [])

        code, out = self.run_cli("import", str(backup))
        self.assertEqual(code, 0)
        self.assertIn("Imported 1 tasks", out)
        self.assertEqual([r["description"] for r in self.stored()], ["Docking"])

    def test_broken_schedule_file_exits_one(self) -> None:
        self.data_file.write_text("not json", encoding="utf-8")
        code, out = self.run_cli("list")
        self.assertEqual(code, 1)
        self.assertIn("[ERROR]", out)

    def test_usage_error_exits_two(self) -> None:
        code, _ = self.run_cli("add", "Only description")
        self.assertEqual(code, 2)


if __name__ == "__main__":
    unittest.main()
