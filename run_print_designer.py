#!/usr/bin/env python
"""
Launcher script for Print Designer.

Usage from repo root:
    python run_print_designer.py compile template.json

Alternative:
    python -m print_designer compile template.json
"""
from print_designer.app import main

if __name__ == "__main__":
    main()
