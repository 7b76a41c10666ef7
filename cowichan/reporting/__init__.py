# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Benchmark outputs.

  - bench: timed repetitions of the chain
  - writer: timings.json, report.txt, config_snapshot.yaml
  - export: PGM/PBM images of intermediate matrices
"""
