import unittest
from calm_coach.onboarding.progress import MAX_GOALS, OnboardingFlow
from calm_coach.storage import keys
from calm_coach.storage.store import MemoryStore, load_json


class TestOnboardingFlow(unittest.TestCase):
    def setUp(self):
        self.store = MemoryStore()
        self.flow = OnboardingFlow(self.store)

    def test_full_walkthrough(self):
        self.assertEqual(self.flow.step, 1)
        self.flow.next()

        # Step 2 needs a coach
        self.assertFalse(self.flow.can_proceed())
        self.flow.select_coach("maya-patel")
        self.flow.next()

        # Step 3 needs a titled goal
        self.assertFalse(self.flow.can_proceed())
        self.flow.update_goal(0, title="Delegate more", description="Stop being the bottleneck")
        self.flow.add_goal()
        self.flow.next()
        self.assertEqual(self.flow.step, 4)

        result = self.flow.next()
        self.assertEqual(result, {
            "selected_coach": "maya-patel",
            "initial_goals": [{"title": "Delegate more", "description": "Stop being the bottleneck"}]
        })
        self.assertIsNone(self.store.get(keys.onboarding_progress()))

    def test_progress_survives_reload(self):
        self.flow.next()
        self.flow.set_gender_filter("male")
        self.flow.select_coach("david-kim")

        saved = load_json(self.store, keys.onboarding_progress())
        self.assertEqual(saved["step"], 2)

        reloaded = OnboardingFlow(self.store)
        self.assertEqual(reloaded.step, 2)
        self.assertEqual(reloaded.progress.selected_coach, "david-kim")
        self.assertTrue(all(c.gender == "male" for c in reloaded.filtered_coaches()))

    def test_goal_limit(self):
        for _ in range(MAX_GOALS - 1):
            self.assertTrue(self.flow.add_goal())
        self.assertFalse(self.flow.add_goal())
        self.assertEqual(len(self.flow.progress.goals), MAX_GOALS)

    def test_progress_saved_on_first_open(self):
        saved = load_json(self.store, keys.onboarding_progress())
        self.assertEqual(saved["step"], 1)
        self.assertEqual(saved["goals"], [{"title": "", "description": ""}])

    def test_last_goal_cannot_be_removed(self):
        self.assertFalse(self.flow.remove_goal(0))
        self.assertEqual(len(self.flow.progress.goals), 1)

        self.flow.add_goal()
        self.flow.update_goal(1, title="Second")
        self.assertTrue(self.flow.remove_goal(0))
        self.assertEqual(self.flow.progress.goals, [{"title": "Second", "description": ""}])
        self.assertFalse(self.flow.remove_goal(0))

    def test_unknown_values_rejected(self):
        with self.assertRaises(ValueError):
            self.flow.select_coach("nobody-here")
        with self.assertRaises(ValueError):
            self.flow.set_gender_filter("other")

    def test_back_and_skip(self):
        self.flow.back()
        self.assertEqual(self.flow.step, 1)
        self.flow.next()
        self.flow.back()
        self.assertEqual(self.flow.step, 1)

        self.flow.skip()
        self.assertIsNone(self.store.get(keys.onboarding_progress()))
        self.assertIsNone(self.flow.next())

    def test_corrupt_progress_starts_over(self):
        self.store.set(keys.onboarding_progress(), "{not json")
        self.assertEqual(OnboardingFlow(self.store).step, 1)

        self.store.set(keys.onboarding_progress(), '{"step": 9, "selected_gender": "robot"}')
        flow = OnboardingFlow(self.store)
        self.assertEqual(flow.step, 1)
        self.assertEqual(flow.progress.selected_gender, "all")


if __name__ == '__main__':
    unittest.main()
