import sys

from pybasectl.cli import main

sys.exit(main())
