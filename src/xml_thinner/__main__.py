"""Allow ``python -m xml_thinner``."""

import sys

from xml_thinner.cli import main

sys.exit(main())
