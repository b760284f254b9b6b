import sys

from .probe.main import main

sys.exit(main())
