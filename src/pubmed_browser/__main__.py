"""Entry point for ``python -m pubmed_browser``."""

import sys

from pubmed_browser.cli import main

sys.exit(main())
