"""Taichi runtime initialization shared by every engine in the process."""
import logging

import taichi as ti

_logger = logging.getLogger(__name__)

_ARCHES = {
    "cpu": ti.cpu,
    "gpu": ti.gpu,  # taichi picks CUDA, Vulkan or Metal, else CPU
    "cuda": ti.cuda,
    "vulkan": ti.vulkan,
    "metal": ti.metal,
}

_GLOBAL_TAICHI_INITIALIZED = False


def initialize_backend(arch: str = "cpu", use_profiler: bool = False) -> bool:
    """Initializes the Taichi runtime once per process.

    Returns True if this call performed the initialization, False if the
    runtime was already up. A failing GPU backend falls back to the CPU.
    """
    global _GLOBAL_TAICHI_INITIALIZED
    if _GLOBAL_TAICHI_INITIALIZED:
        return False

    try:
        ti_arch = _ARCHES[arch]
    except KeyError:
        raise ValueError(f"Unknown backend {arch!r}, expected one of {sorted(_ARCHES)}") from None

    init_kwargs = {
        "offline_cache": True,
        "kernel_profiler": use_profiler,
    }

    _logger.info("Initializing Taichi with backend: %s", arch)
    try:
        ti.init(arch=ti_arch, **init_kwargs)
    except Exception as e:
        if ti_arch == ti.cpu:
            raise
        _logger.warning("Taichi init on %s failed: %s. Falling back to CPU.", arch, e)
        ti.init(arch=ti.cpu, **init_kwargs)

    _logger.info("Taichi initialized. Backend: %s | Profiler: %s", ti.cfg.arch, use_profiler)
    _GLOBAL_TAICHI_INITIALIZED = True
    return True
