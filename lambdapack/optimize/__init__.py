"""Optimization module: bundle-or-raw selection of the files to ship.

Public API:
    build_compression_entries(descriptor, build_dir, settings) -> list[CompressionEntry]
    resolve_include_paths(build_dir, include_paths) -> list[CompressionEntry]
    register_builder(name, factory)
"""

from lambdapack.optimize.bundler import (
    BrowserifyBundler,
    Bundler,
    BundleOptions,
    get_bundler,
    register_builder,
)
from lambdapack.optimize.include_paths import resolve_include_paths
from lambdapack.optimize.minifier import UglifyMinifier
from lambdapack.optimize.pipeline import build_compression_entries

__all__ = [
    "BrowserifyBundler",
    "BundleOptions",
    "Bundler",
    "UglifyMinifier",
    "build_compression_entries",
    "get_bundler",
    "register_builder",
    "resolve_include_paths",
]
