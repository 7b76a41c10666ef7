# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Type-safe configuration schemas for cowichan.

Every config section gets its own frozen pydantic model. Frozen means once
you create it, you cannot mutate it: a benchmark run must use exactly the
parameters that were logged for it.

The models use pydantic v2's ConfigDict with:
  - frozen=True: immutability after construction
  - extra="forbid": unknown fields cause immediate failure
  - validate_default=True: even defaults get type-checked

The default chain parameters use the classic Cowichan Mandelbrot
region (x0=-2, y0=-1, dx=3, dy=2) at a size that runs in seconds on a
laptop. Bigger runs are a matter of editing rows/cols in YAML.
"""

from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

GeneratorName = Literal["mandel", "randmat"]
MaskName = Literal["invperc", "thresh"]
LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class DirectoryConfig(BaseModel):
    """Paths to the standard project directories, all relative to project root."""

    model_config = ConfigDict(frozen=True, extra="forbid", validate_default=True)

    output: str = Field(default="results", description="Benchmark reports and exported matrices")
    logs: str = Field(default="logs", description="System and debug logs")


class GlobalConfig(BaseModel):
    """
    Cross-cutting settings that apply to the entire system.

    This is the first config loaded and it controls things like
    reproducibility (seed), observability (log_level), and project identity.
    """

    model_config = ConfigDict(frozen=True, extra="forbid", validate_default=True)

    config_version: str = Field(
        description="Schema version for compatibility tracking, e.g. '1.0.0'"
    )
    project_name: str = Field(
        default="cowichan", description="Human-readable project identifier"
    )
    seed: int = Field(
        default=42,
        ge=0,
        description="Seed for Python and torch global state",
    )
    log_level: LogLevel = Field(
        default="INFO",
        description="One of DEBUG, INFO, WARNING, ERROR, CRITICAL",
    )
    log_file: Optional[str] = Field(
        default=None,
        description="Optional path for file-based log output, relative to project root",
    )
    directories: DirectoryConfig = Field(default_factory=DirectoryConfig)


class MandelConfig(BaseModel):
    """Region of the complex plane for the Mandelbrot generator."""

    model_config = ConfigDict(frozen=True, extra="forbid", validate_default=True)

    x0: float = Field(default=-2.0, description="Real coordinate of the lower-left corner")
    y0: float = Field(default=-1.0, description="Imaginary coordinate of the lower-left corner")
    dx: float = Field(default=3.0, description="Width of the region")
    dy: float = Field(default=2.0, description="Height of the region")


class RandmatConfig(BaseModel):
    """Parameters for the random matrix generator."""

    model_config = ConfigDict(frozen=True, extra="forbid", validate_default=True)

    seed: int = Field(default=46, ge=0, description="Generator seed; same seed, same matrix")
    limit: int = Field(
        default=2**31 - 1,
        ge=1,
        description="Exclusive upper bound of generated values",
    )


class InvpercConfig(BaseModel):
    """Invasion percolation mask parameters."""

    model_config = ConfigDict(frozen=True, extra="forbid", validate_default=True)

    fill_count: int = Field(default=200, ge=0, description="Number of cells to fill")


class ThreshConfig(BaseModel):
    """Histogram thresholding mask parameters."""

    model_config = ConfigDict(frozen=True, extra="forbid", validate_default=True)

    percent: float = Field(
        default=15.0,
        ge=0.0,
        le=100.0,
        description="Minimum percentage of cells to keep",
    )


class LifeConfig(BaseModel):
    """Game of Life simulation length."""

    model_config = ConfigDict(frozen=True, extra="forbid", validate_default=True)

    generations: int = Field(default=10, ge=0, description="Number of generations to simulate")


class SolverConfig(BaseModel):
    """Tolerances and caps for the solver pair."""

    model_config = ConfigDict(frozen=True, extra="forbid", validate_default=True)

    gauss_tolerance: float = Field(
        default=1e-12,
        gt=0.0,
        description="Pivots at or below this magnitude abort elimination",
    )
    omega: float = Field(
        default=1.25,
        gt=0.0,
        lt=2.0,
        description="SOR relaxation factor",
    )
    sor_tolerance: float = Field(
        default=1e-10,
        gt=0.0,
        description="SOR stops once max|V - Ax| is below this",
    )
    sor_max_iterations: int = Field(
        default=10_000,
        ge=1,
        description="SOR sweep cap",
    )
    strict_convergence: bool = Field(
        default=False,
        description="Raise ConvergenceFailure instead of flagging a non-converged SOR result",
    )


class ChainConfig(BaseModel):
    """
    Everything one run of the kernel chain needs.

    ``generator`` and ``mask`` pick the variant; only the matching parameter
    section is read, the other one keeps its defaults.
    """

    model_config = ConfigDict(frozen=True, extra="forbid", validate_default=True)

    rows: int = Field(default=60, ge=1, description="Rows of the integer matrix")
    cols: int = Field(default=90, ge=1, description="Columns of the integer matrix")
    generator: GeneratorName = Field(default="mandel", description="Matrix source variant")
    mandel: MandelConfig = Field(default_factory=MandelConfig)
    randmat: RandmatConfig = Field(default_factory=RandmatConfig)
    mask: MaskName = Field(default="invperc", description="Mask variant")
    invperc: InvpercConfig = Field(default_factory=InvpercConfig)
    thresh: ThreshConfig = Field(default_factory=ThreshConfig)
    life: LifeConfig = Field(default_factory=LifeConfig)
    solver: SolverConfig = Field(default_factory=SolverConfig)
    workers: int = Field(
        default=1,
        ge=1,
        le=64,
        description="Threads for the generators and the shuffle; never changes results",
    )


class BenchConfig(BaseModel):
    """Repeated timed runs of the chain."""

    model_config = ConfigDict(frozen=True, extra="forbid", validate_default=True)

    executions: int = Field(default=30, ge=1, description="Number of timed chain runs")
    output_directory: str = Field(
        default="results",
        description="Where bench reports get written, relative to project root",
    )
    export_matrices: bool = Field(
        default=False,
        description="Also write the intermediate matrices of the last run as Netpbm images",
    )


class CowichanConfig(BaseModel):
    """
    Top-level config container.

    A YAML file needs only the ``global:`` section; ``chain:`` and
    ``bench:`` fall back to their defaults when absent.
    """

    model_config = ConfigDict(frozen=True, extra="forbid", validate_default=True)

    global_config: GlobalConfig = Field(alias="global")
    chain: ChainConfig = Field(default_factory=ChainConfig)
    bench: BenchConfig = Field(default_factory=BenchConfig)
