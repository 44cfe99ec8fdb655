"""
Scripted sessions against the interactive menu.

Prompts are answered from a list; running out of answers behaves like
Ctrl-D (EOFError), which must end the session cleanly.
"""

import io
import unittest

from rich.console import Console

from astroschedule import factory
from astroschedule.interactive import run_interactive
from astroschedule.manager import ScheduleManager
from astroschedule.model import Priority


def scripted(*answers: str):
    queue = list(answers)

    def prompt(msg: str) -> str:
        if not queue:
            raise EOFError
        return queue.pop(0)

    return prompt


class TestInteractive(unittest.TestCase):
    def setUp(self) -> None:
        factory.reset_counter()
        self.manager = ScheduleManager()
        self.console = Console(file=io.StringIO(), color_system=None, width=120)

    def run_session(self, *answers: str) -> str:
        run_interactive(self.manager, console=self.console, prompt=scripted(*answers))
        return self.console.file.getvalue()

    def test_add_with_default_priority_and_view(self) -> None:
        out = self.run_session("1", "Breakfast", "07:00", "08:00", "", "3", "0")
        tasks = self.manager.get_all_tasks()
        self.assertEqual(len(tasks), 1)
        self.assertIs(tasks[0].priority, Priority.MEDIUM)
        self.assertIn("Breakfast", out)
        self.assertIn("07:00-08:00", out)
        self.assertTrue(out.rstrip().endswith("Bye."))

    def test_conflict_is_reported_and_loop_continues(self) -> None:
        out = self.run_session(
            "1", "Briefing", "09:00", "10:00", "High",
            "1", "Call", "09:30", "10:30", "Low",
            "0",
        )
        self.assertIn("[ERROR]", out)
        self.assertEqual([t.description for t in self.manager.get_all_tasks()], ["Briefing"])

    def test_edit_flow(self) -> None:
        self.manager.add_task(factory.create_task("Lab", "13:00", "14:00", "Low"))
        self.run_session("4", "lab", "", "13:30", "14:30", "high", "0")
        task = self.manager.get_task_by_description("Lab")
        self.assertEqual((task.start_time, task.end_time), ("13:30", "14:30"))
        self.assertIs(task.priority, Priority.HIGH)

    def test_edit_missing_task(self) -> None:
        out = self.run_session("4", "Ghost", "0")
        self.assertIn('[ERROR] Task with description "Ghost" not found.', out)

    def test_complete_and_remove(self) -> None:
        self.manager.add_task(factory.create_task("Lab", "13:00", "14:00", "Low"))
        self.run_session("5", "Lab")
        self.assertTrue(self.manager.get_task_by_description("Lab").completed)

        out = self.run_session("2", "Lab", "2", "Lab", "0")
        self.assertEqual(self.manager.task_count, 0)
        self.assertIn("Task not found: Lab", out)

    def test_filters(self) -> None:
        self.manager.add_task(factory.create_task("Early", "06:00", "07:00", "High"))
        self.manager.add_task(factory.create_task("Late", "20:00", "21:00", "Low"))

        out = self.run_session("6", "medium", "7", "5:00", "08:00", "0")
        self.assertIn("No tasks scheduled with Medium priority.", out)
        self.assertIn("Early", out)

    def test_invalid_choice_and_eof(self) -> None:
        out = self.run_session("9")
        self.assertIn("Invalid choice.", out)
        self.assertIn("Bye.", out)


if __name__ == "__main__":
    unittest.main()
