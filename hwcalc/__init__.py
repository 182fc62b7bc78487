"""
LLM Hardware Calculator
"""

__version__ = "0.1.0"

from .calculator import (
    calculate_hardware_recommendation,
    calculate_vram_usage,
    calculate_performance,
    calculate_cloud_cost,
    calculate_on_disk_size,
    estimate,
    get_quantization_factor,
    size_hardware,
    CalculationConfig,
    Recommendation,
    VRAMBreakdown,
    ModelQuantization,
    KVCacheQuantization,
    MemoryMode,
    InferenceMode,
    GPUS_UNBOUNDED,
)
from .main import app

__all__ = [
    "app",
    "calculate_hardware_recommendation",
    "calculate_vram_usage",
    "calculate_performance",
    "calculate_cloud_cost",
    "calculate_on_disk_size",
    "estimate",
    "get_quantization_factor",
    "size_hardware",
    "CalculationConfig",
    "Recommendation",
    "VRAMBreakdown",
    "ModelQuantization",
    "KVCacheQuantization",
    "MemoryMode",
    "InferenceMode",
    "GPUS_UNBOUNDED",
]
