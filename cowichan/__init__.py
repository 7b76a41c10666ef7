# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
cowichan: chained numerical kernel benchmark.

Subpackages:
  - kernels: the individual toys and their error types
  - pipeline: the fixed stage order with its two fork-join points
  - reporting: bench timings, report files, matrix export
  - config, logging, runtime, utils, cli: the plumbing around them
"""

__version__ = "0.1.0"
