import argparse
import json
import logging
import os
import shutil

from account_service import AccountService
from db import KeyValueStore, user_key
from models import Exercise, ExerciseSet

COLLECTIONS = ("workouts", "meals", "challenges")


def export_user(db_path: str, username: str, output_dir: str = ".") -> str:
    """Write every collection of ``username`` to one JSON file and return its path."""
    store = KeyValueStore(db_path)
    user = AccountService(store).users.find_by_username(username)
    if user is None:
        raise ValueError(f"unknown user: {username}")
    data = {
        "user": user.public_dict(),
        **{c: store.get(user_key(user.id, c), []) for c in COLLECTIONS},
    }
    out_path = os.path.join(output_dir, f"{username}_export.json")
    with open(out_path, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=2)
    return out_path


def backup_db(db_path: str, backup_path: str) -> None:
    shutil.copy(db_path, backup_path)


def restore_db(backup_path: str, db_path: str) -> None:
    shutil.copy(backup_path, db_path)


def demo_data(db_path: str) -> None:
    """Create a demo account with sample data if it does not exist yet."""
    accounts = AccountService(KeyValueStore(db_path))
    if accounts.users.find_by_username("demo") is not None:
        print("Demo user already exists")
        return
    accounts.register("demo", "demo", "Demo User")
    session = accounts.require_session()
    session.workouts.log(
        "Leg Day",
        [
            Exercise(
                name="Squat",
                sets=[ExerciseSet(reps=5, weight=100.0), ExerciseSet(reps=8, weight=80.0)],
            )
        ],
    )
    session.nutrition.add_meal("Breakfast", 500, 30, 60, 15)
    session.challenges.add_preset(2)
    accounts.logout()
    print("Demo data inserted")


def serve(db_path: str, yaml_path: str, host: str, port: int) -> None:
    import uvicorn
    from rest_api import FitAPI

    api = FitAPI(db_path=db_path, yaml_path=yaml_path)
    uvicorn.run(api.app, host=host, port=port)


def main() -> None:
    parser = argparse.ArgumentParser(description="Utility commands")
    parser.add_argument("--verbose", action="store_true")
    sub = parser.add_subparsers(dest="cmd", required=True)

    exp = sub.add_parser("export")
    exp.add_argument("--db", default="fitgenius.db")
    exp.add_argument("--user", required=True)
    exp.add_argument("--out", default=".")

    bkp = sub.add_parser("backup")
    bkp.add_argument("--db", default="fitgenius.db")
    bkp.add_argument("--out", default="backup.db")

    rst = sub.add_parser("restore")
    rst.add_argument("--in", dest="src", default="backup.db")
    rst.add_argument("--db", default="fitgenius.db")

    demo = sub.add_parser("demo")
    demo.add_argument("--db", default="fitgenius.db")

    srv = sub.add_parser("serve")
    srv.add_argument("--db", default="fitgenius.db")
    srv.add_argument("--yaml", default="settings.yaml")
    srv.add_argument("--host", default="127.0.0.1")
    srv.add_argument("--port", type=int, default=8000)

    args = parser.parse_args()
    logging.basicConfig(level=logging.INFO if args.verbose else logging.WARNING)

    if args.cmd == "export":
        print(export_user(args.db, args.user, args.out))
    elif args.cmd == "backup":
        backup_db(args.db, args.out)
    elif args.cmd == "restore":
        restore_db(args.src, args.db)
    elif args.cmd == "demo":
        demo_data(args.db)
    elif args.cmd == "serve":
        serve(args.db, args.yaml, args.host, args.port)


if __name__ == "__main__":
    main()
