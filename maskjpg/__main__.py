import sys

from maskjpg.cli import main

sys.exit(main())
