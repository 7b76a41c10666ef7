# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""Stage orchestration: generate, mask, evolve, solve, check."""
