#!/usr/bin/env python3
"""
Fair Dice - a provably fair dice game with win probability analysis
"""

from fairdice.cli.__main__ import main


if __name__ == '__main__':
    main()
