"""Entry point for python -m photosnap."""
import sys

from .cli import main

sys.exit(main())
