#!/usr/bin/env python3
import subprocess
import sys
from pathlib import Path

BACKEND_DIR = Path(__file__).resolve().parent.parent


def run_migrations():
    try:
        print("Running database migrations...")
        subprocess.run(["alembic", "upgrade", "head"], check=True, cwd=BACKEND_DIR)
        print("Migrations completed successfully!")
    except subprocess.CalledProcessError as e:
        print(f"Migration failed: {e}")
        sys.exit(1)
    except FileNotFoundError:
        print("Alembic not found. Make sure it's installed.")
        sys.exit(1)


if __name__ == "__main__":
    run_migrations()
