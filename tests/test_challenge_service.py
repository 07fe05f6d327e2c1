import os
import sys
import unittest

sys.path.append(os.path.dirname(os.path.dirname(__file__)))
from challenge_service import (
    PRESET_CHALLENGES,
    ChallengeNotFoundError,
    ChallengeService,
)
from db import ChallengeRepository, KeyValueStore
from models import Challenge, ChallengeType


def _challenge(target: float = 10, kind: ChallengeType = ChallengeType.FREQUENCY) -> Challenge:
    return Challenge("c1", "Test", "", target, "x", kind)


class ChallengeRulesTestCase(unittest.TestCase):
    def test_increment_steps(self) -> None:
        self.assertEqual(
            ChallengeService.increment_amount(_challenge(kind=ChallengeType.VOLUME)), 500
        )
        self.assertEqual(
            ChallengeService.increment_amount(_challenge(kind=ChallengeType.DISTANCE)), 1
        )

    def test_update_progress_clamps(self) -> None:
        c = _challenge(target=10)
        self.assertEqual(ChallengeService.update_progress(c, -3).current, 0)
        done = ChallengeService.update_progress(c, 25)
        self.assertEqual(done.current, 10)
        self.assertTrue(done.completed)
        back = ChallengeService.update_progress(done, 4)
        self.assertFalse(back.completed)
        self.assertEqual(c.current, 0)

    def test_completed_challenge_is_inert(self) -> None:
        c = ChallengeService.update_progress(_challenge(target=2), 2)
        self.assertIs(ChallengeService.increment(c), c)

    def test_progress_fraction(self) -> None:
        c = ChallengeService.update_progress(_challenge(target=10), 4)
        self.assertAlmostEqual(ChallengeService.progress_fraction(c), 0.4)


class ChallengeServiceTestCase(unittest.TestCase):
    def setUp(self) -> None:
        self.db_path = "test_challenges.db"
        if os.path.exists(self.db_path):
            os.remove(self.db_path)
        self.service = ChallengeService(
            ChallengeRepository(KeyValueStore(self.db_path), "u1")
        )

    def tearDown(self) -> None:
        if os.path.exists(self.db_path):
            os.remove(self.db_path)

    def test_presets(self) -> None:
        self.assertEqual(
            [p.title for p in PRESET_CHALLENGES],
            ["Runner 5k", "Monthly Strength", "Volume King", "Weekly Marathon"],
        )
        c = self.service.add_preset(2)
        self.assertEqual((c.target, c.unit, c.type), (10000, "kg", ChallengeType.VOLUME))
        self.assertEqual(c.current, 0)
        self.assertFalse(c.completed)
        with self.assertRaises(ChallengeNotFoundError):
            self.service.add_preset(len(PRESET_CHALLENGES))

    def test_volume_king_completes(self) -> None:
        c = self.service.add_preset(2)
        for _ in range(21):
            updated = self.service.increment_by_id(c.id)
        self.assertEqual(updated.current, 10000)
        self.assertTrue(updated.completed)
        stored = self.service.list()[0]
        self.assertEqual(stored.current, 10000)
        self.assertTrue(stored.completed)

    def test_increment_only_touches_target(self) -> None:
        a = self.service.add_preset(0)
        b = self.service.add_preset(1)
        self.service.increment_by_id(b.id)
        by_id = {c.id: c for c in self.service.list()}
        self.assertEqual(by_id[a.id].current, 0)
        self.assertEqual(by_id[b.id].current, 1)

    def test_set_progress(self) -> None:
        c = self.service.add("Push-ups", 100, "reps", ChallengeType.FREQUENCY)
        self.assertTrue(self.service.set_progress(c.id, 150).completed)
        self.assertEqual(self.service.list()[0].current, 100)

    def test_add_validation(self) -> None:
        with self.assertRaises(ValueError):
            self.service.add(" ", 10, "x", ChallengeType.FREQUENCY)
        with self.assertRaises(ValueError):
            self.service.add("Zero", 0, "x", ChallengeType.FREQUENCY)

    def test_unknown_and_delete(self) -> None:
        with self.assertRaises(ChallengeNotFoundError):
            self.service.increment_by_id("missing")
        c = self.service.add_preset(0)
        self.service.delete(c.id)
        self.assertEqual(self.service.list(), [])
        with self.assertRaises(ChallengeNotFoundError):
            self.service.delete(c.id)


if __name__ == "__main__":
    unittest.main()
