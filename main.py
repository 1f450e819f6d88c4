#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Colorblind Theme — Main Entry Point
==================================================
Thin launcher for running the host from a source checkout:

    python main.py open my-project

Delegates everything to colorblind_theme.cli.
"""

import sys

from colorblind_theme.cli import main

if __name__ == "__main__":
    sys.exit(main())
