# ExprDiff - Module Entry Point
# Copyright (c) 2024 ExprDiff Contributors. All rights reserved.

from .cli import main

raise SystemExit(main())
