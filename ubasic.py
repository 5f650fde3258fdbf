#!/usr/bin/env python3
"""
uBASIC interpreter entry point.

Usage: python ubasic.py program.bas [--verbose] [--max-steps N]
"""

from ubasic.interpreter import main

if __name__ == '__main__':
    main()
