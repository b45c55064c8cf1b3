import os

USER_SPECS_DATA = "user_specs.yaml"
_PROJECT_DIR = os.path.dirname(os.path.abspath(__file__))
DATA_DIR = os.path.join(_PROJECT_DIR, "data")
LOG_PATH = os.path.join(DATA_DIR, "tapedeck.log")

DEFAULT_LIBRARY = "~/Music"
PLACEHOLDER_ENTRY = "Processing"
NOTHING_PLAYING = "Nothing Playing"

# Scheduling (seconds)
TICK_RATE = 0.25
RESCAN_DELAY = 0.5
DORMANT_INTERVAL = 3600
PLAY_START_TIMEOUT = 2.0

# Layout
SCREEN_MARGIN = 2
HIGHLIGHT = "\033[1;30;102m"
RESET = "\033[0m"
KEY_HELP = "Up/Down: Move  Enter: Play  P: Pause  O: Resume  Q: Quit"

# Key names produced by terminal.decode_key
KEY_UP = "up"
KEY_DOWN = "down"
KEY_LEFT = "left"
KEY_RIGHT = "right"
KEY_ENTER = "enter"
KEY_ESCAPE = "escape"
