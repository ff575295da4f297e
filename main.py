# main.py
"""
TaskGate - точка входа

    python main.py route implement user authentication api
    python main.py status
    python main.py config
"""

import sys

from taskgate.cli import main


if __name__ == "__main__":
    sys.exit(main())
