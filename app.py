"""Run the development server: ``python app.py``.

Settings come from ``config`` (APP_ENV picks development, testing or production).
"""
import os

from src.workforce_hub.workforce_hub import create_app

app = create_app()


if __name__ == "__main__":
    app.run(
        host=os.getenv("FLASK_RUN_HOST", "127.0.0.1"),
        port=int(os.getenv("FLASK_RUN_PORT", "5000")),
        debug=app.config["DEBUG"],
    )
