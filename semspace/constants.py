# semspace/constants.py
"""
Shared constants for the semantic space pipeline.
"""
import os

# Marker appended to tokens that were filtered as stopwords. The token still
# occupies its slot in the window but is never scored as a context word.
STOPWORD_FLAG = "##stop"

# Window role of a filtered token.
EMPTY_TOKEN = ""

COALS_WINDOW_SIZE = 4
HAL_WINDOW_SIZE = 5

COALS_MAX_WORDS = 15000
COALS_MAX_DIMENSIONS = 14000
COALS_REDUCED_DIMENSIONS = 800

DEFAULT_LOCK_STRIPES = 64
DEFAULT_PARALLEL_DOC_THRESHOLD = 5000
MAX_WORKERS = 16

LOG_DIR = os.environ.get("SEMSPACE_LOG_DIR", "logs")
