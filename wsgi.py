"""WSGI entry point for the HireFlow server (gunicorn wsgi:app)."""

import os
import sys

from app import create_app

# Ensure the app directory is in the path
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

# A failure inside create_app (bad settings, database or storage unreachable)
# must reach the gunicorn log with its traceback before the worker exits.
try:
    app = create_app()
except Exception:
    import traceback

    print("\nFATAL: Failed to create Flask application during startup:\n", file=sys.stderr)
    traceback.print_exc()
    raise

if __name__ == "__main__":
    app.run()
