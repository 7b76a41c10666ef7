# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Numerical kernels of the chain.

Integer matrices are int64 tensors, boolean matrices are bool tensors and
real-valued data is float64, all row-major. Every kernel returns a new
value and leaves its inputs untouched.
"""
