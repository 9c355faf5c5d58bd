"""
Main entry point for running the package as a module.

Usage:
    python -m asset_export export -d <design-file> -i preview.png -n logo -f png
    python -m asset_export batch -d <design-file> -i preview.png -b logo -f png -s 1 -s 2
    python -m asset_export list --project <project>
"""

import sys
from .cli import main

if __name__ == '__main__':
    sys.exit(main())
