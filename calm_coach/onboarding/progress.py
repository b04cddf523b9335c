"""
Four-step onboarding: welcome, coach selection, initial goals, quick tutorial.

Progress is written to the durable store after every change so a user who
closes the page picks up on the same step. Completing or skipping clears it.
"""
from dataclasses import asdict, dataclass, field
from typing import Optional

from calm_coach.llm.personalities import get_coach, list_coaches
from calm_coach.storage import keys
from calm_coach.storage.store import DurableStore, load_json, save_json

TOTAL_STEPS = 4
MAX_GOALS = 3
GENDER_FILTERS = ("all", "female", "male", "nonbinary")


@dataclass
class OnboardingProgress:
    step: int = 1
    selected_coach: str = ""
    selected_gender: str = "all"
    goals: list = field(default_factory=lambda: [{"title": "", "description": ""}])

    @classmethod
    def from_dict(cls, data: dict) -> "OnboardingProgress":
        progress = cls()
        step = data.get("step")
        if isinstance(step, int) and 1 <= step <= TOTAL_STEPS:
            progress.step = step
        if isinstance(data.get("selected_coach"), str):
            progress.selected_coach = data["selected_coach"]
        if data.get("selected_gender") in GENDER_FILTERS:
            progress.selected_gender = data["selected_gender"]
        goals = data.get("goals")
        if isinstance(goals, list) and goals:
            progress.goals = [
                {"title": str(g.get("title", "")), "description": str(g.get("description", ""))}
                for g in goals[:MAX_GOALS] if isinstance(g, dict)
            ] or progress.goals
        return progress


class OnboardingFlow:
    def __init__(self, store: DurableStore, feature: str = "ai_coach"):
        self.store = store
        self.key = keys.onboarding_progress(feature)
        saved = load_json(store, self.key)
        self.progress = OnboardingProgress.from_dict(saved) if isinstance(saved, dict) else OnboardingProgress()
        self.finished = False
        if not isinstance(saved, dict):
            self._save()

    @property
    def step(self) -> int:
        return self.progress.step

    def _save(self):
        if not self.finished:
            save_json(self.store, self.key, asdict(self.progress))

    def clear(self):
        self.store.remove(self.key)

    def filtered_coaches(self):
        return list_coaches(self.progress.selected_gender)

    def set_gender_filter(self, gender: str):
        if gender not in GENDER_FILTERS:
            raise ValueError(f"Unknown gender filter: {gender}")
        self.progress.selected_gender = gender
        self._save()

    def select_coach(self, coach_id: str):
        if get_coach(coach_id) is None:
            raise ValueError(f"Unknown coach: {coach_id}")
        self.progress.selected_coach = coach_id
        self._save()

    def add_goal(self) -> bool:
        if len(self.progress.goals) >= MAX_GOALS:
            return False
        self.progress.goals.append({"title": "", "description": ""})
        self._save()
        return True

    def remove_goal(self, index: int) -> bool:
        """The last remaining goal can't be removed."""
        if len(self.progress.goals) <= 1:
            return False
        del self.progress.goals[index]
        self._save()
        return True

    def update_goal(self, index: int, title: Optional[str] = None, description: Optional[str] = None):
        goal = self.progress.goals[index]
        if title is not None:
            goal["title"] = title
        if description is not None:
            goal["description"] = description
        self._save()

    def can_proceed(self) -> bool:
        step = self.progress.step
        if step == 2:
            return self.progress.selected_coach != ""
        if step == 3:
            return any(g["title"].strip() for g in self.progress.goals)
        return step in (1, 4)

    def back(self):
        if self.progress.step > 1:
            self.progress.step -= 1
            self._save()

    def next(self) -> Optional[dict]:
        """
        Advances one step. On the last step completes the flow and returns
        {"selected_coach", "initial_goals"}; otherwise returns None.
        """
        if self.finished or not self.can_proceed():
            return None

        if self.progress.step < TOTAL_STEPS:
            self.progress.step += 1
            self._save()
            return None

        result = {
            "selected_coach": self.progress.selected_coach,
            "initial_goals": [g for g in self.progress.goals if g["title"].strip()],
        }
        self.finished = True
        self.clear()
        return result

    def skip(self):
        self.finished = True
        self.clear()
