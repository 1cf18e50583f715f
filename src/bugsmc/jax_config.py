"""
JAX Configuration - MUST be imported before any JAX imports.

This module sets environment variables for JAX configuration including:
- Persistent compilation cache directory for the random draw kernels
- Minimum compile time threshold for caching
- CPU as the default platform (draws are small and consumed on the host)
"""
import os
from pathlib import Path

# --- PLATFORM ---
# Draw blocks are copied to the host immediately; a GPU round-trip only adds latency
os.environ.setdefault("JAX_PLATFORMS", "cpu")

# --- PERSISTENT COMPILATION CACHE ---
_JAX_CACHE_DIR = Path.home() / ".cache" / "jax" / "bugsmc_cache"
_JAX_CACHE_DIR.mkdir(parents=True, exist_ok=True)
os.environ.setdefault("JAX_COMPILATION_CACHE_DIR", str(_JAX_CACHE_DIR))
os.environ.setdefault("JAX_PERSISTENT_CACHE_MIN_COMPILE_TIME_SECS", "1.0")

# Tallies are float64; keep the JAX draws at the same precision
os.environ.setdefault("JAX_ENABLE_X64", "true")
