#!/usr/bin/env python3
"""
USL-Estimate 主程序入口
"""

import sys

from usl_estimate.cli.commands import main

if __name__ == "__main__":
    sys.exit(main())
