import unittest

from core.models import DayStatus, StreakData, Task
from core.streak import completed_days, day_status, display_streak, history_streak, update_streak

D = "2024-03-10"
D_1 = "2024-03-09"
D_2 = "2024-03-08"
D_3 = "2024-03-07"


def make_task(day, completed, n=0):
    return Task(id=f"{day}-{n}", title=f"task {n}", date=day, completed=completed)


class TestDayStatus(unittest.TestCase):
    def test_no_tasks_is_none(self):
        self.assertIsNone(day_status([]))

    def test_all_completed_is_success(self):
        tasks = [make_task(D, True, 0), make_task(D, True, 1)]
        self.assertIs(day_status(tasks), DayStatus.SUCCESS)

    def test_partial_and_zero_completion_are_failed(self):
        self.assertIs(day_status([make_task(D, True, 0), make_task(D, False, 1)]), DayStatus.FAILED)
        self.assertIs(day_status([make_task(D, False, 0)]), DayStatus.FAILED)

    def test_accepts_generator(self):
        self.assertIs(day_status(make_task(D, True, i) for i in range(3)), DayStatus.SUCCESS)


class TestUpdateStreak(unittest.TestCase):
    def test_continuing_streak_increments(self):
        before = StreakData(streak_count=3, longest_streak=5, last_completed_date=D_1)
        after = update_streak(before, D, D_1, True)
        self.assertEqual(after, StreakData(streak_count=4, longest_streak=5, last_completed_date=D))

    def test_broken_streak_resets_to_zero_when_today_incomplete(self):
        before = StreakData(streak_count=4, longest_streak=5, last_completed_date=D_3)
        after = update_streak(before, D, D_1, False)
        self.assertEqual(after, StreakData(streak_count=0, longest_streak=5, last_completed_date=D_3))

    def test_broken_streak_restarts_at_one_when_today_completed(self):
        before = StreakData(streak_count=4, longest_streak=5, last_completed_date=D_2)
        after = update_streak(before, D, D_1, True)
        self.assertEqual(after.streak_count, 1)
        self.assertEqual(after.longest_streak, 5)
        self.assertEqual(after.last_completed_date, D)

    def test_first_completion_ever(self):
        after = update_streak(StreakData(), D, D_1, True)
        self.assertEqual(after, StreakData(streak_count=1, longest_streak=1, last_completed_date=D))

    def test_incomplete_without_history_is_unchanged(self):
        self.assertEqual(update_streak(StreakData(), D, D_1, False), StreakData())

    def test_incomplete_within_grace_is_unchanged(self):
        for last in (D, D_1):
            before = StreakData(streak_count=2, longest_streak=2, last_completed_date=last)
            self.assertEqual(update_streak(before, D, D_1, False), before)

    def test_idempotent_for_same_day(self):
        before = StreakData(streak_count=3, longest_streak=5, last_completed_date=D_1)
        once = update_streak(before, D, D_1, True)
        twice = update_streak(once, D, D_1, True)
        self.assertEqual(once, twice)

    def test_longest_streak_grows_with_count(self):
        before = StreakData(streak_count=5, longest_streak=5, last_completed_date=D_1)
        after = update_streak(before, D, D_1, True)
        self.assertEqual(after.streak_count, 6)
        self.assertEqual(after.longest_streak, 6)

    def test_longest_never_decreases_and_bounds_count(self):
        lasts = [None, D_3, D_2, D_1, D]
        for last in lasts:
            for count, longest in ((0, 0), (1, 4), (4, 4), (2, 9)):
                for completed in (True, False):
                    before = StreakData(streak_count=count, longest_streak=longest, last_completed_date=last)
                    after = update_streak(before, D, D_1, completed)
                    self.assertGreaterEqual(after.longest_streak, before.longest_streak)
                    self.assertGreaterEqual(after.longest_streak, after.streak_count)
                    self.assertGreaterEqual(after.streak_count, 0)

    def test_does_not_mutate_input(self):
        before = StreakData(streak_count=3, longest_streak=5, last_completed_date=D_1)
        update_streak(before, D, D_1, True)
        self.assertEqual(before.streak_count, 3)


class TestDisplayStreak(unittest.TestCase):
    def test_shows_stored_count_while_alive(self):
        self.assertEqual(display_streak(StreakData(3, 5, D), D, D_1), 3)
        self.assertEqual(display_streak(StreakData(3, 5, D_1), D, D_1), 3)

    def test_shows_zero_once_broken(self):
        self.assertEqual(display_streak(StreakData(3, 5, D_2), D, D_1), 0)
        self.assertEqual(display_streak(StreakData(), D, D_1), 0)


class TestHistoryStreak(unittest.TestCase):
    def test_counts_consecutive_success_days(self):
        tasks = [make_task(D, True), make_task(D_1, True), make_task(D_2, True), make_task(D_3, False)]
        self.assertEqual(history_streak(tasks, D), 3)

    def test_unfinished_today_does_not_break(self):
        tasks = [make_task(D, False), make_task(D_1, True), make_task(D_2, True)]
        self.assertEqual(history_streak(tasks, D), 2)

    def test_day_without_tasks_breaks(self):
        tasks = [make_task(D, True), make_task(D_2, True)]
        self.assertEqual(history_streak(tasks, D), 1)

    def test_window_limits_lookback(self):
        tasks = [make_task(D, True), make_task(D_1, True), make_task(D_2, True)]
        self.assertEqual(history_streak(tasks, D, window=2), 2)

    def test_completed_days(self):
        tasks = [make_task(D, True), make_task(D_1, False), make_task(D_2, True, 0), make_task(D_2, True, 1)]
        self.assertEqual(completed_days(tasks, [D_2, D_1, D]), [D_2, D])


if __name__ == "__main__":
    unittest.main(verbosity=2)
