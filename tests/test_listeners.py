import io
import unittest

from rich.console import Console

from astroschedule.errors import InvalidTimeRangeError
from astroschedule.events import Event, EventKind
from astroschedule.factory import create_task
from astroschedule.listeners import ConsoleNotifier, TaskLogger


def _console() -> Console:
    return Console(file=io.StringIO(), color_system=None, width=120)


class TestConsoleNotifier(unittest.TestCase):
    def setUp(self) -> None:
        self.console = _console()
        self.notifier = ConsoleNotifier(self.console, show_timestamps=False, use_colors=False)
        self.task = create_task("Exercise", "07:30", "08:30", "High")
        self.other = create_task("Breakfast", "08:00", "09:00", "Medium")

    def output(self) -> str:
        return self.console.file.getvalue()

    def test_conflict_block(self) -> None:
        self.notifier.on_event(
            Event.create(
                EventKind.TASK_CONFLICT,
                'Task "Exercise" conflicts with "Breakfast"',
                task=self.task,
                conflicting_task=self.other,
            )
        )
        out = self.output()
        self.assertIn("CONFLICT DETECTED!", out)
        self.assertIn("Breakfast [Medium] (08:00-09:00)", out)
        self.assertIn("Operation NOT completed.", out)

    def test_added_and_completed(self) -> None:
        self.notifier.on_event(Event.create(EventKind.TASK_ADDED, "added", task=self.task))
        self.notifier.on_event(Event.create(EventKind.TASK_COMPLETED, "done", task=self.task))
        out = self.output()
        self.assertIn("Task added successfully.", out)
        self.assertIn("Exercise [High] (07:30-08:30)", out)
        self.assertIn("Well done, Astronaut!", out)

    def test_failure_shows_error_type(self) -> None:
        error = InvalidTimeRangeError("End time must be after start time.")
        self.notifier.on_event(Event.from_error(EventKind.TASK_ADD_FAILED, error))
        out = self.output()
        self.assertIn("OPERATION FAILED:", out)
        self.assertIn("Error type: InvalidTimeRangeError", out)

    def test_timestamp_prefix(self) -> None:
        notifier = ConsoleNotifier(self.console, show_timestamps=True, use_colors=False)
        notifier.on_event(Event.create(EventKind.SCHEDULE_CLEARED, "Schedule cleared.", count=0))
        self.assertRegex(self.output(), r"\[\d{2}:\d{2}:\d{2}\] System info:")

    def test_interest_filter(self) -> None:
        notifier = ConsoleNotifier(self.console, interested_in=[EventKind.TASK_CONFLICT])
        self.assertTrue(notifier.is_interested_in(EventKind.TASK_CONFLICT))
        self.assertFalse(notifier.is_interested_in(EventKind.TASK_ADDED))


class TestTaskLogger(unittest.TestCase):
    def setUp(self) -> None:
        self.audit = TaskLogger()
        self.task = create_task("Exercise", "07:30", "08:30", "High")

    def test_operation_logged_at_info(self) -> None:
        with self.assertLogs("astroschedule.audit", level="INFO") as cm:
            self.audit.on_event(Event.create(EventKind.TASK_ADDED, "added", task=self.task))
        self.assertEqual(cm.records[0].levelname, "INFO")
        self.assertIn("[OPERATION] added", cm.output[0])
        self.assertIn(self.task.id, cm.output[0])

    def test_conflict_logged_at_warning(self) -> None:
        other = create_task("Breakfast", "08:00", "09:00", "Medium")
        with self.assertLogs("astroschedule.audit", level="INFO") as cm:
            self.audit.on_event(
                Event.create(EventKind.TASK_CONFLICT, "clash", task=self.task, conflicting_task=other)
            )
        self.assertEqual(cm.records[0].levelname, "WARNING")
        self.assertIn("[CONFLICT] clash with existing task: Breakfast", cm.output[0])

    def test_failure_logged_at_error(self) -> None:
        error = InvalidTimeRangeError("bad range")
        with self.assertLogs("astroschedule.audit", level="INFO") as cm:
            self.audit.on_event(Event.from_error(EventKind.TASK_VALIDATION_FAILED, error, task_id="T1"))
        self.assertEqual(cm.records[0].levelname, "ERROR")
        self.assertIn("[FAILURE] bad range", cm.output[0])
        self.assertIn("error_name='InvalidTimeRangeError'", cm.output[0])
        self.assertIn("task_id='T1'", cm.output[0])


if __name__ == "__main__":
    unittest.main()
