import os
import sys
import unittest

sys.path.append(os.path.dirname(os.path.dirname(__file__)))
from models import (
    ID_ALPHABET,
    Challenge,
    ChallengeType,
    ExerciseSet,
    Gender,
    MacroField,
    Meal,
    User,
    UserProfile,
    Workout,
    generate_id,
)


class ModelsTestCase(unittest.TestCase):
    def test_generate_id(self) -> None:
        ids = {generate_id() for _ in range(200)}
        self.assertEqual(len(ids), 200)
        for value in ids:
            self.assertEqual(len(value), 9)
            self.assertTrue(set(value) <= set(ID_ALPHABET))

    def test_set_volume_and_optional_rpe(self) -> None:
        s = ExerciseSet(id="s1", reps=5, weight=100.0)
        self.assertEqual(s.volume, 500.0)
        self.assertNotIn("rpe", s.to_dict())
        s.rpe = 8
        self.assertEqual(s.to_dict()["rpe"], 8)

    def test_workout_from_stored_json(self) -> None:
        data = {
            "id": "w1",
            "date": "2024-05-10T18:00:00.000Z",
            "name": "Push",
            "exercises": [
                {"id": "e1", "name": "Bench", "sets": [{"id": "s1", "reps": "8", "weight": 60}]}
            ],
            "totalVolume": 480,
        }
        workout = Workout.from_dict(data)
        self.assertEqual(workout.total_volume, 480.0)
        self.assertEqual(workout.exercises[0].sets[0].reps, 8.0)
        self.assertEqual(workout.to_dict()["totalVolume"], 480.0)

    def test_meal_macro(self) -> None:
        meal = Meal("m1", "Lunch", 700, 40, 80, 20, "2024-05-10T12:00:00")
        self.assertEqual(meal.macro(MacroField.PROTEIN), 40)
        self.assertEqual(meal.macro(MacroField.CALORIES), 700)

    def test_challenge_type_parsed(self) -> None:
        c = Challenge.from_dict(
            {
                "id": "c1",
                "title": "Volume King",
                "description": "",
                "target": 10000,
                "current": 500,
                "unit": "kg",
                "completed": False,
                "type": "volume",
            }
        )
        self.assertIs(c.type, ChallengeType.VOLUME)
        self.assertEqual(c.current, 500.0)

    def test_public_dict_hides_password(self) -> None:
        user = User(
            "u1",
            "mario",
            "Mario Rossi",
            password="pw",
            profile=UserProfile(age=30, gender=Gender.MALE),
        )
        data = user.public_dict()
        self.assertNotIn("password", data)
        self.assertEqual(data["profile"], {"age": 30, "gender": "M"})
        self.assertEqual(User.from_dict(user.to_dict()).password, "pw")


if __name__ == "__main__":
    unittest.main()
