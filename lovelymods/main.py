# lovelymods/main.py
import sys

from lovelymods.ui.application import run
from lovelymods.services.logging import setup_logging

def main():
    setup_logging() # Configure logging early
    return run(sys.argv)

if __name__ == "__main__":
    main()
