#!/usr/bin/env python3
"""Script to populate the database with sample workout templates."""

import os
import sys

from dotenv import load_dotenv

# Add src to path so we can import our modules
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

from database import SessionLocal, init_db
from errors import PersistenceError
from sql_backend import seed_templates

# Load environment variables
load_dotenv()

SAMPLE_TEMPLATES = [
    {
        "name": "Push Day",
        "exercises": [
            {"id": "bench", "name": "Bench Press", "target_sets": 4, "target_reps": 8},
            {"id": "ohp", "name": "Overhead Press", "target_sets": 3, "target_reps": 10},
            {"id": "dips", "name": "Dips", "target_sets": 3, "target_reps": 12},
        ],
    },
    {
        "name": "Pull Day",
        "exercises": [
            {"id": "deadlift", "name": "Deadlift", "target_sets": 3, "target_reps": 5},
            {"id": "rows", "name": "Barbell Rows", "target_sets": 4, "target_reps": 8},
            {"id": "pullups", "name": "Pull-ups", "target_sets": 3, "target_reps": 8},
        ],
    },
    {
        "name": "Leg Day",
        "exercises": [
            {"id": "squat", "name": "Squat", "target_sets": 5, "target_reps": 5},
            {
                "id": "rdl",
                "name": "Romanian Deadlift",
                "target_sets": 3,
                "target_reps": 10,
            },
            {"id": "lunges", "name": "Walking Lunges", "target_sets": 3, "target_reps": 12},
        ],
    },
]


def main():
    init_db()
    try:
        created = seed_templates(SessionLocal, SAMPLE_TEMPLATES)
    except PersistenceError as e:
        print(f"Error populating database: {e}")
        sys.exit(1)

    print(f"Created {created} templates ({len(SAMPLE_TEMPLATES) - created} already existed)")
    print("\nDatabase populated successfully!")


if __name__ == "__main__":
    main()
