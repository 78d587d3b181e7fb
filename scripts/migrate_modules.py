#!/usr/bin/env python3
"""
Split the legacy monolithic setup script into standalone module files.

Use when:
- Migrating an old setup-saas.sh into the modules/ layout.
- Re-generating modules after editing the embedded heredocs.

Run from project root:
  python scripts/migrate_modules.py --source setup-saas.sh --output modules
  # or, once installed
  saas-migrate --source setup-saas.sh --output modules
"""

import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from forge.cli import migrate_main

if __name__ == "__main__":
    sys.exit(migrate_main())
