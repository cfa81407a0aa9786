"""PySide6 entrypoint: launches the Techo Collager window from collager.main.

Run from the project root with ``python main.py`` or, once installed, via the
``collager`` script.
"""

import sys

from collager.main import main


if __name__ == "__main__":
    sys.exit(main())
