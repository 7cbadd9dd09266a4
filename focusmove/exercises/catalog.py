"""Desk mobility exercises shown between a work session and its break.

``ExerciseCatalog.next_item()`` hands out exercises in random order
without repeats; once every exercise has been shown the history is
cleared and the cycle starts again.
"""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Exercise:
    id: int
    name: str
    instructions: str
    duration_seconds: int = 60


EXERCISES: tuple[Exercise, ...] = (
    Exercise(1, "Neck Rotation",
             "Sit up straight. Slowly turn your head to the right until you feel a "
             "gentle stretch, return to centre and repeat to the left. "
             "10 repetitions each side."),
    Exercise(2, "Shoulder Stretch",
             "Cross your right arm in front of your body. With your left hand, gently "
             "pull the right elbow toward your chest. Hold 15 seconds, switch sides. "
             "Repeat twice."),
    Exercise(3, "Wrist Circles",
             "Extend your arms in front of you. Circle your wrists 10 times in each "
             "direction. Helps prevent tendinitis and repetitive strain."),
    Exercise(4, "Finger Stretch",
             "Open and close your hands fully 10 times. Then extend each finger on its "
             "own and hold for 3 seconds. Relieves tension after typing."),
    Exercise(5, "Shoulder Shrugs",
             "Sit tall. Raise your shoulders toward your ears, hold 5 seconds, then "
             "relax completely. Repeat 8 times."),
    Exercise(6, "Seated Trunk Twist",
             "Feet flat on the floor, twist your torso to the right holding the chair "
             "back. Hold 10 seconds and repeat on the other side. 3 times each."),
    Exercise(7, "Side Stretch",
             "Standing, interlace your fingers and reach overhead. Lean slowly to the "
             "right and hold 15 seconds. Return and repeat to the left. Twice each."),
    Exercise(8, "Wrist Flexor Stretch",
             "Extend your right arm palm up. With your left hand gently pull the "
             "fingers down. Hold 15 seconds, switch arms. Twice each."),
    Exercise(9, "Shoulder Rolls",
             "Roll your shoulders in full circles, 10 forward and 10 backward. Keep "
             "the movement slow and controlled."),
    Exercise(10, "Lower Back Release",
             "Seated, fold forward slowly and let your arms hang toward the floor. "
             "Hold 20 seconds and come up slowly. Repeat 3 times."),
    Exercise(11, "Spine Extension",
             "Seated, hands behind your head, gently arch your back and look at the "
             "ceiling. Hold 10 seconds. Repeat 4 times."),
    Exercise(12, "Ankle Circles",
             "Seated, lift one foot and circle the ankle 10 times in each direction. "
             "Switch feet. Improves circulation in the legs."),
    Exercise(13, "Quad Stretch",
             "Standing (hold on to something if needed), bend your right knee and "
             "bring the foot toward your glutes. Hold 20 seconds, switch legs. "
             "Twice each."),
    Exercise(14, "Neck Flexion",
             "Sit tall and lower your chin toward your chest. Hold 10 seconds. Then "
             "tilt your head back gently. Repeat 3 times."),
    Exercise(15, "Chest Opener",
             "Standing, clasp your hands behind your back, straighten your arms and "
             "lift them gently to open the chest. Hold 20 seconds. Repeat 3 times."),
    Exercise(16, "Seated Leg Raises",
             "Seated, extend one leg straight and parallel to the floor. Hold 10 "
             "seconds and lower. Alternate legs, 5 times each."),
    Exercise(17, "Hip Circles",
             "Standing, hands on hips, make wide circles with your hips, 10 in each "
             "direction. Keep your feet planted."),
    Exercise(18, "Forearm Extensor Stretch",
             "Extend your right arm palm down. With your left hand pull the fingers "
             "up and back. Hold 15 seconds, switch. Twice each arm."),
    Exercise(19, "Deep Breathing Stretch",
             "Sit tall. Breathe in through your nose while raising your arms out to "
             "the sides, hold 3 seconds at the top, breathe out through your mouth "
             "as you lower them. Repeat 8 times."),
    Exercise(20, "Seated Cat-Cow",
             "Sit on the edge of your chair. Inhale and arch your back, looking up. "
             "Exhale and round your spine, chin to chest. Repeat 8 times slowly."),
)


class ExerciseCatalog:
    """Random, non-repeating exercise picker."""

    def __init__(
        self,
        exercises: tuple[Exercise, ...] | list[Exercise] = EXERCISES,
        *,
        rng: random.Random | None = None,
    ) -> None:
        if not exercises:
            raise ValueError("exercise catalog must not be empty")
        self._exercises = tuple(exercises)
        self._rng = rng or random.Random()
        self._used_ids: set[int] = set()

    def __len__(self) -> int:
        return len(self._exercises)

    @property
    def used_count(self) -> int:
        return len(self._used_ids)

    def next_item(self) -> Exercise:
        if len(self._used_ids) >= len(self._exercises):
            logger.info("All %d exercises shown, starting over", len(self._exercises))
            self._used_ids.clear()

        available = [ex for ex in self._exercises if ex.id not in self._used_ids]
        chosen = self._rng.choice(available)
        self._used_ids.add(chosen.id)
        logger.debug(
            "Selected exercise %r (%d/%d used)",
            chosen.name, len(self._used_ids), len(self._exercises),
        )
        return chosen

    def reset_used(self) -> None:
        self._used_ids.clear()
