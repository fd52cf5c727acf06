# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""Allow ``python -m productlens``."""

import sys

from productlens.cli import main

sys.exit(main())
