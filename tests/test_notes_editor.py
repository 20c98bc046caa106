import unittest

from core.notes_editor import EditorState, NoteFieldEditor


class TestNoteFieldEditor(unittest.TestCase):
    def setUp(self):
        self.editor = NoteFieldEditor(debounce=1.0, cooldown=0.5, remote_guard=2.0)

    def test_debounce_collapses_burst_into_one_save(self):
        self.editor.edit("a", 0.0)
        self.editor.edit("ab", 0.4)
        due = self.editor.edit("abc", 0.8)
        self.assertAlmostEqual(due, 1.8)

        # Таймер первой правки уже неактуален
        self.assertIsNone(self.editor.debounce_expired(1.0))
        self.assertEqual(self.editor.debounce_expired(2.0), "abc")
        self.assertIs(self.editor.state, EditorState.SAVING)
        self.assertTrue(self.editor.is_saving)

    def test_full_cycle_returns_to_idle(self):
        self.editor.edit("hello", 0.0)
        self.assertEqual(self.editor.debounce_expired(1.0), "hello")
        self.assertAlmostEqual(self.editor.save_completed(1.2), 1.7)
        self.assertIs(self.editor.state, EditorState.COOLING_DOWN)
        self.assertFalse(self.editor.cooldown_expired(1.5))
        self.assertTrue(self.editor.cooldown_expired(1.8))
        self.assertIs(self.editor.state, EditorState.IDLE)

    def test_edit_during_save_schedules_another_save(self):
        self.editor.edit("v1", 0.0)
        self.editor.debounce_expired(1.0)
        self.editor.edit("v2", 1.1)
        self.assertIsNone(self.editor.save_completed(1.3))
        self.assertIs(self.editor.state, EditorState.EDITING)
        self.assertEqual(self.editor.debounce_expired(2.5), "v2")

    def test_edit_during_cooldown_returns_to_editing(self):
        self.editor.edit("v1", 0.0)
        self.editor.debounce_expired(1.0)
        self.editor.save_completed(1.1)
        self.editor.edit("v2", 1.2)
        self.assertIs(self.editor.state, EditorState.EDITING)
        self.assertFalse(self.editor.cooldown_expired(5.0))

    def test_remote_updates_blocked_until_guard_and_idle(self):
        self.assertTrue(self.editor.accepts_remote(0.0))
        self.editor.edit("local", 10.0)
        self.assertFalse(self.editor.accepts_remote(10.5))

        self.editor.debounce_expired(11.0)
        self.assertFalse(self.editor.accepts_remote(11.1))
        self.editor.save_completed(11.2)
        self.assertFalse(self.editor.accepts_remote(11.3))
        self.editor.cooldown_expired(11.8)

        # IDLE, но защитный интервал после правки ещё не прошёл
        self.assertFalse(self.editor.accepts_remote(11.9))
        self.assertTrue(self.editor.accepts_remote(12.0))

    def test_force_save_skips_timer(self):
        self.assertIsNone(self.editor.force_save())
        self.editor.edit("draft", 0.0)
        self.assertEqual(self.editor.force_save(), "draft")
        self.assertIs(self.editor.state, EditorState.SAVING)

    def test_reset_drops_pending_edit(self):
        self.editor.edit("draft", 0.0)
        self.editor.reset()
        self.assertIs(self.editor.state, EditorState.IDLE)
        self.assertIsNone(self.editor.debounce_expired(5.0))

    def test_save_completed_outside_saving_is_ignored(self):
        self.assertIsNone(self.editor.save_completed(0.0))
        self.assertIs(self.editor.state, EditorState.IDLE)


if __name__ == "__main__":
    unittest.main(verbosity=2)
