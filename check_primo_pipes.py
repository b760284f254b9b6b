#!/usr/bin/env python3
"""
Primo Back Office pipes check for Nagios-compatible monitoring.

Example:
    check_primo_pipes.py -H https://primo.example.edu:1601 -c 12 \\
        -u monitor -s 6 -S "Daily,Weekly"

See ``check_primo_pipes.py --help`` for all options.
"""

import sys

from primo_pipes.probe.main import main


if __name__ == "__main__":
    sys.exit(main())
