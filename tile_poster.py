#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Tile a PostScript page onto several printable sheets with a cover page.
"""

# local repo modules
import postscript_tiler.cli


if __name__ == "__main__":
	postscript_tiler.cli.main()
