"""Resource limits for bundler and minifier subprocesses.

Provides a `preexec_fn`-compatible function that sets hard resource limits
on the node tooling child processes before exec. There is no wall-clock
timeout on bundling, so the CPU rlimit is what bounds a runaway bundle.

Platform notes:
  - Linux / macOS: `resource` module is available and rlimits are enforced.
  - Windows: `resource` module is unavailable. `apply_resource_limits()`
    is a no-op on Windows.

Memory policy:
  - 12 GB virtual-address-space cap (`RLIMIT_AS`) by default. Node / V8
    reserves several GB of virtual mappings at startup even for small
    bundles, so a tight cap makes browserify die before it reads a file.

Environment overrides:
  - LAMBDAPACK_TOOL_RLIMIT_AS_BYTES: integer bytes; 0 or negative skips RLIMIT_AS
  - LAMBDAPACK_TOOL_RLIMIT_CPU_SECONDS: integer seconds for CPU limit
"""

import logging
import os
import sys
from typing import Optional

_DEFAULT_MEM_LIMIT_BYTES = 12 * 1024 * 1024 * 1024  # 12 GB
_DEFAULT_CPU_LIMIT_SECONDS = 600

_MEM_LIMIT_ENV = "LAMBDAPACK_TOOL_RLIMIT_AS_BYTES"
_CPU_LIMIT_ENV = "LAMBDAPACK_TOOL_RLIMIT_CPU_SECONDS"


def _parse_optional_positive_int(raw: Optional[str]) -> Optional[int]:
    if raw is None:
        return None
    value = int(raw.strip())
    if value <= 0:
        return 0
    return value


def _resolve_memory_limit_bytes() -> Optional[int]:
    override = _parse_optional_positive_int(os.environ.get(_MEM_LIMIT_ENV))
    if override is not None:
        return override
    return _DEFAULT_MEM_LIMIT_BYTES


def _resolve_cpu_limit_seconds() -> int:
    raw = os.environ.get(_CPU_LIMIT_ENV)
    if not raw:
        return _DEFAULT_CPU_LIMIT_SECONDS
    parsed = int(raw.strip())
    if parsed <= 0:
        return _DEFAULT_CPU_LIMIT_SECONDS
    return parsed


def apply_resource_limits() -> None:
    """Set per-process resource limits before exec. No-op on Windows.

    Usage:
        subprocess.run(cmd, preexec_fn=apply_resource_limits, ...)
    """
    if sys.platform == "win32":
        return

    try:
        import resource

        mem_limit = _resolve_memory_limit_bytes()
        if mem_limit and mem_limit > 0:
            resource.setrlimit(resource.RLIMIT_AS, (mem_limit, resource.RLIM_INFINITY))

        cpu_limit = _resolve_cpu_limit_seconds()
        resource.setrlimit(resource.RLIMIT_CPU, (cpu_limit, resource.RLIM_INFINITY))

        logging.getLogger(__name__).debug(
            "Tool resource limits applied: mem=%s cpu=%ds",
            f"{mem_limit / (1024**3):.1f}GB" if mem_limit else "unlimited",
            cpu_limit,
        )

    except (ImportError, ValueError, OSError) as exc:
        logging.getLogger(__name__).warning(
            "Failed to apply resource limits: %s", exc
        )
