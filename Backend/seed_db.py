"""
Demo-data seeding script for WordCraft.

Populates the database with:
  - a handful of guest players
  - several scored games per player across the four writing styles
  - a freshly rebuilt leaderboard

Usage:
    python seed_db.py [--reset] [--games-per-player N]
"""

import argparse
import random
import time

from sqlalchemy import text

import game_recorder
import leaderboard
import user_resolver
from database import SessionLocal, create_tables
from schemas import Metrics, ScoreReport
from writing_styles import FALLBACK_PROMPTS, WRITING_STYLES

DEMO_PLAYERS = [
    "Alex Johnson", "Jamie Smith", "Taylor Wilson", "Morgan Lee", "Casey Brown",
    "Jordan Miller", "Riley Davis", "Quinn Thomas", "Avery Martin",
]


def _random_report(rng: random.Random) -> ScoreReport:
    overall = rng.randint(55, 98)

    def near():
        return max(0, min(100, overall + rng.randint(-8, 8)))

    return ScoreReport(
        overall_score=overall,
        metrics=Metrics(clarity=near(), structure=near(), word_choice=near(), grammar=near()),
        style_specific_score=near(),
        strengths=["Clear opening", "Consistent tone", "Good pacing"],
        weaknesses=["Conclusion feels rushed", "Some repetition"],
        style_specific_tips=["Vary sentence length", "Cut filler words", "End with a strong line"],
    )


def reset(db):
    """Delete all games, users and derived rows."""
    for table in ("leaderboard", "leaderboard_state", "games", "users"):
        db.execute(text(f"DELETE FROM {table}"))
    db.commit()


def seed(db, games_per_player: int = 3, rng: random.Random = None) -> int:
    """Insert demo games and rebuild the leaderboard; returns the number of games."""
    rng = rng or random.Random()
    count = 0
    for name in DEMO_PLAYERS:
        user_id = user_resolver.resolve(db, user_resolver.Anonymous(), name)
        for _ in range(games_per_player):
            style = rng.choice(WRITING_STYLES)
            game_recorder.record(
                db,
                user_id,
                FALLBACK_PROMPTS[style],
                "Seeded demo response.",
                style,
                _random_report(rng),
            )
            count += 1
    leaderboard.refresh(db)
    return count


def main():
    parser = argparse.ArgumentParser(description="Seed WordCraft with demo games")
    parser.add_argument("--reset", action="store_true", help="delete existing data first")
    parser.add_argument("--games-per-player", type=int, default=3)
    args = parser.parse_args()

    create_tables()
    db = SessionLocal()
    try:
        if args.reset:
            print("⏳ Cleaning existing data...")
            reset(db)

        print(f"⏳ Inserting games for {len(DEMO_PLAYERS)} players …")
        start = time.time()
        count = seed(db, args.games_per_player)
        print(f"   ✓ {count} games inserted and leaderboard rebuilt in {time.time() - start:.1f}s")
    finally:
        db.close()

    print("\n🎉 Database seeding complete!")


if __name__ == "__main__":
    main()
