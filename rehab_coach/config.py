# config.py

import os

import dotenv

dotenv.load_dotenv()

PROGRESS_PATH = os.getenv("REHAB_COACH_PROGRESS_PATH", "exercise_progress.json")
BACKEND_URL = os.getenv("REHAB_COACH_BACKEND_URL", "http://127.0.0.1:8000")
HTTP_TIMEOUT = float(os.getenv("REHAB_COACH_HTTP_TIMEOUT", "2.0"))
LOG_LEVEL = os.getenv("REHAB_COACH_LOG_LEVEL", "INFO")
