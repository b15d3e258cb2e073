import os
import sys

# Base directory
IF_FROZEN = getattr(sys, "frozen", False)
BASE_DIR = sys._MEIPASS if IF_FROZEN else os.path.dirname(os.path.abspath(__file__))

# Paths
STATIC_DIR = os.path.join(BASE_DIR, "static")
DATA_DIR = os.getenv("EXAM_DATA_DIR", os.path.join(BASE_DIR, "data"))
LOG_FILE = os.path.join(BASE_DIR, "launch.log")
EXAM_BANK_FILE = os.getenv("EXAM_BANK_FILE", os.path.join(DATA_DIR, "exams.json"))
SUBMISSIONS_FILE = os.getenv("SUBMISSIONS_FILE", os.path.join(DATA_DIR, "submissions.jsonl"))

# Server
DEFAULT_HOST = os.getenv("HOST", "127.0.0.1")
DEFAULT_PORT = int(os.getenv("PORT", "8000"))
SESSION_TTL = int(os.getenv("SESSION_TTL", "10800"))   # 3 hours, longer than any exam
SESSION_CLEANUP_INTERVAL = 300

# Exam session
TICK_INTERVAL_SECONDS = 1.0
SUBMIT_TIMEOUT_SECONDS = float(os.getenv("SUBMIT_TIMEOUT_SECONDS", "15"))
LOW_TIME_WARNING_SECONDS = 600   # timer turns red under 10 minutes

# Anti-cheating policy
COUNT_CONTEXT_MENU_AS_VIOLATION = os.getenv("COUNT_CONTEXT_MENU_AS_VIOLATION", "true").lower() == "true"
COUNT_NAVIGATION_AS_VIOLATION = os.getenv("COUNT_NAVIGATION_AS_VIOLATION", "false").lower() == "true"
