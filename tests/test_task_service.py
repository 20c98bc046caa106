import tempfile
import unittest
from datetime import date

from core.models import DayStatus, Subtask, ValidationError
from dashboard.core.data_manager import DataManager
from services.streak_service import StreakService
from services.task_service import TaskNotFoundError, TaskService
from utils.datetime_utils import previous_day_key, today_key

USER = "tester"


class TestTaskService(unittest.IsolatedAsyncioTestCase):
    async def asyncSetUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.store = DataManager(self._tmp.name)
        await self.store.initialize()
        self.streaks = StreakService(self.store)
        self.service = TaskService(self.store, self.streaks, USER)
        self.service.start()
        self.today = today_key()

    async def asyncTearDown(self):
        self.service.close()
        self._tmp.cleanup()

    async def test_cache_follows_store(self):
        self.assertFalse(self.service.loading)
        task_id = await self.service.add_task("Пробежка", self.today, time_allocation="30 мин")
        task = self.service.get_task(task_id)
        self.assertEqual(task.time_allocation, "30 мин")
        self.assertFalse(task.completed)

        await self.service.delete_task(task_id)
        with self.assertRaises(TaskNotFoundError):
            self.service.get_task(task_id)

    async def test_add_task_validates(self):
        with self.assertRaises(ValidationError):
            await self.service.add_task("   ", self.today)
        with self.assertRaises(ValidationError):
            await self.service.add_task("Задача", "10.03.2024")

    async def test_date_is_immutable(self):
        task_id = await self.service.add_task("Задача", "2024-03-10")
        with self.assertRaises(ValidationError):
            await self.service.update_task(task_id, date="2024-03-11")
        with self.assertRaises(ValidationError):
            await self.service.update_task(task_id, priority="high")

        await self.service.update_task(task_id, title="Новое название", description=" детали ")
        task = self.service.get_task(task_id)
        self.assertEqual(task.title, "Новое название")
        self.assertEqual(task.description, "детали")
        self.assertEqual(task.date, "2024-03-10")

    async def test_toggle_updates_streak(self):
        a = await self.service.add_task("A", self.today)
        b = await self.service.add_task("B", self.today)

        task, result = await self.service.toggle_task(a)
        self.assertTrue(task.completed)
        self.assertIs(result.today_status, DayStatus.FAILED)
        self.assertFalse(result.changed)

        _, result = await self.service.toggle_task(b)
        self.assertIs(result.today_status, DayStatus.SUCCESS)
        self.assertTrue(result.changed)
        self.assertEqual(result.streak.streak_count, 1)
        self.assertEqual(result.streak.last_completed_date, self.today)

        stored = await self.streaks.get_streak_data(USER)
        self.assertEqual(stored.longest_streak, 1)
        self.assertEqual(await self.streaks.calculate_current_streak(USER, self.today), 1)

    async def test_update_completed_runs_streak_update(self):
        task_id = await self.service.add_task("A", self.today)
        result = await self.service.update_task(task_id, completed=True)
        self.assertTrue(result.changed)
        self.assertEqual(result.streak.streak_count, 1)
        self.assertEqual((await self.streaks.get_streak_data(USER)).last_completed_date, self.today)

        # Повтор того же значения серию не трогает
        self.assertIsNone(await self.service.update_task(task_id, completed=True))
        self.assertIsNone(await self.service.update_task(task_id, title="Другое"))

    async def test_toggle_continues_yesterdays_streak(self):
        await self.store.patch_profile(USER, {
            "streak_count": 3, "longest_streak": 5, "last_completed_date": previous_day_key(self.today),
        })
        task_id = await self.service.add_task("A", self.today)
        _, result = await self.service.toggle_task(task_id)
        self.assertEqual(result.streak.streak_count, 4)
        self.assertEqual(result.streak.longest_streak, 5)

        # Повторный пересчёт ничего не меняет
        again = await self.streaks.update_streak(USER, self.today)
        self.assertFalse(again.changed)
        self.assertEqual(again.streak.streak_count, 4)

    async def test_subtasks(self):
        task_id = await self.service.add_task("С подзадачами", self.today, subtasks=[Subtask.create("раз")])
        first = self.service.get_task(task_id).subtasks[0]
        second = await self.service.add_subtask(task_id, "два")
        self.assertNotEqual(first.id, second.id)
        self.assertTrue(second.id.startswith("subtask_"))

        await self.service.toggle_subtask(task_id, second.id)
        subtasks = self.service.get_task(task_id).subtasks
        self.assertEqual([st.completed for st in subtasks], [False, True])
        self.assertEqual(self.service.get_task(task_id).subtasks_completed_count, 1)

        with self.assertRaises(TaskNotFoundError):
            await self.service.toggle_subtask(task_id, "subtask_missing")

        await self.service.delete_subtask(task_id, first.id)
        self.assertEqual([st.id for st in self.service.get_task(task_id).subtasks], [second.id])

    async def test_reset_day_clears_only_that_day(self):
        a = await self.service.add_task("A", "2024-03-10", subtasks=[Subtask.create("x")])
        other = await self.service.add_task("B", "2024-03-11")
        await self.service.update_task(a, completed=True)
        await self.service.toggle_subtask(a, self.service.get_task(a).subtasks[0].id)
        await self.service.update_task(other, completed=True)

        count = await self.service.reset_day("2024-03-10")
        self.assertEqual(count, 1)
        task = self.service.get_task(a)
        self.assertFalse(task.completed)
        self.assertFalse(task.subtasks[0].completed)
        self.assertTrue(self.service.get_task(other).completed)

    async def test_reset_empty_day(self):
        self.assertEqual(await self.service.reset_day("2024-01-01"), 0)

    async def test_week_summary(self):
        # 2024-03-04 is a Monday
        a = await self.service.add_task("Пн", "2024-03-04")
        await self.service.add_task("Вт", "2024-03-05")
        await self.service.add_task("След. неделя", "2024-03-11")
        await self.service.update_task(a, completed=True)

        self.assertEqual(len(self.service.get_tasks_for_week(date(2024, 3, 4))), 2)
        summary = self.service.get_week_summary(date(2024, 3, 4))
        self.assertEqual(len(summary), 7)
        self.assertEqual(summary[0], {"date": "2024-03-04", "total": 1, "completed": 1, "status": "success"})
        self.assertEqual(summary[1]["status"], "failed")
        self.assertIsNone(summary[2]["status"])

    async def test_month_summary(self):
        a = await self.service.add_task("A", "2024-09-02")
        await self.service.add_task("B", "2024-09-03")
        await self.service.add_task("C", "2024-10-01")
        await self.service.update_task(a, completed=True)

        summary = self.service.get_month_summary(2024, 9)
        self.assertEqual(summary["grid"][6], 1)
        self.assertEqual(summary["statuses"], {"2024-09-02": "success", "2024-09-03": "failed"})
        self.assertEqual(summary["stats"], {"total": 2, "completed": 1})
        self.assertIs(self.service.get_day_completion("2024-09-03"), DayStatus.FAILED)
        self.assertIsNone(self.service.get_day_completion("2024-09-04"))

    async def test_history_streak_from_tasks(self):
        yesterday = previous_day_key(self.today)
        a = await self.service.add_task("вчера", yesterday)
        await self.service.update_task(a, completed=True)
        await self.service.add_task("сегодня", self.today)
        self.assertEqual(await self.streaks.calculate_history_streak(USER, self.today), 1)


if __name__ == "__main__":
    unittest.main(verbosity=2)
