"""
Module entrypoint for `python -m print_designer`.

This allows running the command line tool from the repository root:
    python -m print_designer compile template.json
"""
from print_designer.app import main

if __name__ == "__main__":
    main()
