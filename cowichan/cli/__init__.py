# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""The cowichan command line: run, bench, export, info."""
