"""Sandbox module for the isolated per-run build directory."""

from lambdapack.sandbox.build_dir import assemble_build_dir, create_build_dir
from lambdapack.sandbox.exclusion import ExclusionMatcher

__all__ = ["ExclusionMatcher", "assemble_build_dir", "create_build_dir"]
