"""
LLM Hardware Calculator - Core Estimation Engine

This module implements the heuristic formulas used to size hardware for
LLM inference:
- Model weights: M_weights = params * bytes_per_param
- KV cache: M_kv = params * 0.7 * (context / 4096) * batch * (kv_bytes / 2)
  scaled by 1.5 for bulk (prefill-heavy) inference
- Overhead: 1 GB runtime context + 5% of the weights
- Throughput: memory bandwidth / bytes read per token, derated to 35%

Every function here is pure. Lookups that miss a catalog fall back to a
default instead of raising.
"""

import logging
import math
from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP, localcontext
from enum import Enum
from typing import Optional, Tuple, Union

logger = logging.getLogger(__name__)


class ModelQuantization(str, Enum):
    """Supported quantization types for model weights."""
    F32 = "F32"
    F16 = "F16"
    Q8 = "Q8"
    Q6 = "Q6"
    Q5 = "Q5"
    Q4 = "Q4"
    Q3 = "Q3"
    Q2 = "Q2"
    GPTQ = "GPTQ"
    AWQ = "AWQ"


class KVCacheQuantization(str, Enum):
    """Supported quantization types for KV cache."""
    F32 = "F32"
    F16 = "F16"
    Q8 = "Q8"
    Q5 = "Q5"
    Q4 = "Q4"


class MemoryMode(str, Enum):
    """Memory architecture of the target machine."""
    DISCRETE_GPU = "DISCRETE_GPU"
    UNIFIED_MEMORY = "UNIFIED_MEMORY"


class InferenceMode(str, Enum):
    """Token-by-token generation or prefill-heavy batch workloads."""
    INCREMENTAL = "incremental"
    BULK = "bulk"


# Bytes per parameter, relative to a 1-byte (8-bit) baseline
QUANTIZATION_FACTORS = {
    "F32": 4.0,
    "F16": 2.0,
    "Q8": 1.0,
    "Q6": 0.75,
    "Q5": 0.625,
    "Q4": 0.5,
    "GPTQ": 0.6,
    "AWQ": 0.6,
    "Q3": 0.375,
    "Q2": 0.25,
}

DEFAULT_QUANTIZATION_FACTOR = 1.0

# KV cache factors are relative to an FP16 cache
KV_CACHE_BASELINE_FACTOR = 2.0
KV_CACHE_GB_PER_BILLION_PARAMS = 0.7
KV_CACHE_REFERENCE_CONTEXT = 4096
BULK_KV_CACHE_MULTIPLIER = 1.5

BASE_OVERHEAD_GB = 1.0
OVERHEAD_FACTOR = 0.05

# Fraction of theoretical bandwidth-bound throughput seen in practice
EFFICIENCY_FACTOR = 0.35

MAX_GPUS = 8
GPUS_UNBOUNDED = "unbounded"
MIN_SYSTEM_RAM_GB = 8.0
SYSTEM_RAM_FACTOR = 0.5

# Enough digits to quantize any finite float to a few decimal places
ROUNDING_PRECISION = 400

# GPUs in a multi-GPU cloud node
CLOUD_NODE_GPUS = 8
HOURS_PER_MONTH = 730


@dataclass(frozen=True)
class GPUProfile:
    """Memory capacity and bandwidth of a known GPU."""
    name: str
    vram_gb: float
    bandwidth_gbs: float


@dataclass(frozen=True)
class CloudInstance:
    """A rentable cloud GPU instance."""
    provider: str
    instance: str
    gpu: str
    vram_gb: float
    hourly_cost: float


# The first entry doubles as the fallback profile for unknown capacities
GPU_PROFILES: Tuple[GPUProfile, ...] = (
    GPUProfile("NVIDIA RTX 4060 Ti", 8, 448),
    GPUProfile("NVIDIA RTX 4070 Ti", 12, 717),
    GPUProfile("NVIDIA RTX 4080", 16, 737),
    GPUProfile("NVIDIA RTX 4090", 24, 1008),
    GPUProfile("NVIDIA RTX 6000 Ada", 32, 1210),
    GPUProfile("NVIDIA A100 40GB (SXM4)", 40, 1555),
    GPUProfile("NVIDIA RTX A6000 Ada", 48, 1920),
    GPUProfile("NVIDIA H100 80GB (SXM5)", 80, 3350),
)

CLOUD_INSTANCES: Tuple[CloudInstance, ...] = (
    CloudInstance("AWS", "g4dn.xlarge", "NVIDIA T4", 16, 0.526),
    CloudInstance("AWS", "g5.2xlarge", "NVIDIA A10G", 24, 1.006),
    CloudInstance("GCP", "a2-highgpu-1g", "NVIDIA A100", 40, 3.22),
    CloudInstance("AWS", "p4d.24xlarge", "NVIDIA A100", 40, 32.77),
    CloudInstance("AWS", "p5.48xlarge", "NVIDIA H100", 80, 98.32),
)


@dataclass(frozen=True)
class CalculationConfig:
    """Configuration parameters for a hardware estimate."""
    # Model configuration
    params: float = 8  # Model size in billions of parameters
    model_quantization: ModelQuantization = ModelQuantization.Q4
    context_length: int = 8192

    # KV cache / workload
    kv_cache_quantization: KVCacheQuantization = KVCacheQuantization.Q8
    inference_mode: InferenceMode = InferenceMode.INCREMENTAL
    batch_size: int = 1

    # Hardware
    memory_mode: MemoryMode = MemoryMode.DISCRETE_GPU
    system_memory_gb: float = 128
    gpu_vram_gb: float = 24


@dataclass(frozen=True)
class VRAMBreakdown:
    """VRAM usage broken down by component, in GB."""
    model_weights_gb: float
    kv_cache_gb: float
    overhead_gb: float
    total_gb: float


@dataclass(frozen=True)
class PerformanceEstimate:
    """Estimated generation throughput."""
    tokens_per_second: float


@dataclass(frozen=True)
class CloudCostEstimate:
    """Cheapest matching cloud instance and its monthly price."""
    provider: str
    instance: str
    gpu: str
    monthly_cost: float


@dataclass(frozen=True)
class HardwareSizing:
    """GPU count or unified-memory verdict for a VRAM requirement."""
    gpu_setup: str
    gpus_required: Union[int, str]
    fits_unified: bool
    system_ram_needed_gb: float


@dataclass(frozen=True)
class Recommendation:
    """Complete hardware recommendation for one configuration."""
    gpu_setup: str
    vram_needed: VRAMBreakdown
    fits_unified: bool
    system_ram_needed_gb: float
    gpus_required: Union[int, str]
    performance: PerformanceEstimate
    cloud_cost: Optional[CloudCostEstimate]
    on_disk_size_gb: float


def _round(value: float, places: int) -> float:
    """Round half away from zero on the exact binary value of ``value``."""
    if not math.isfinite(value):
        return value
    with localcontext() as ctx:
        ctx.prec = ROUNDING_PRECISION
        exponent = Decimal(1).scaleb(-places)
        return float(Decimal(value).quantize(exponent, rounding=ROUND_HALF_UP))


def _format_gb(value: float) -> str:
    """Render a capacity without a trailing '.0' for whole numbers."""
    if float(value).is_integer():
        return str(int(value))
    return str(value)


def get_quantization_factor(
    quantization: Union[ModelQuantization, KVCacheQuantization, str]
) -> float:
    """
    Look up the bytes-per-parameter multiplier for a quantization.

    Unknown identifiers return 1.0 rather than raising.

    Args:
        quantization: Quantization enum member or its string value

    Returns:
        Multiplier relative to a 1-byte baseline
    """
    key = quantization.value if isinstance(quantization, Enum) else quantization
    factor = QUANTIZATION_FACTORS.get(key)
    if factor is None:
        logger.debug("Unknown quantization %r, using factor %s", key, DEFAULT_QUANTIZATION_FACTOR)
        return DEFAULT_QUANTIZATION_FACTOR
    return factor


def get_kv_cache_quantization_factor(
    quantization: Union[KVCacheQuantization, str]
) -> float:
    """KV cache quantization shares the model quantization table."""
    return get_quantization_factor(quantization)


def calculate_on_disk_size(
    params: float,
    model_quantization: Union[ModelQuantization, str]
) -> float:
    """Size of the model files in GB."""
    return _round(params * get_quantization_factor(model_quantization), 2)


def calculate_vram_usage(
    params: float,
    model_quantization: Union[ModelQuantization, str],
    context_length: int,
    kv_cache_quantization: Union[KVCacheQuantization, str],
    inference_mode: Union[InferenceMode, str],
    batch_size: int
) -> VRAMBreakdown:
    """
    Calculate VRAM required for weights, KV cache and runtime overhead.

    The total is summed from the unrounded components and then rounded, so
    it can differ from the sum of the rounded fields by a cent.

    Args:
        params: Model size in billions of parameters
        model_quantization: Weight quantization type
        context_length: Context window in tokens
        kv_cache_quantization: KV cache quantization type
        inference_mode: Incremental or bulk inference
        batch_size: Number of sequences processed together

    Returns:
        VRAMBreakdown with every field rounded to 2 decimals
    """
    model_weights = params * get_quantization_factor(model_quantization)

    kv_factor = get_kv_cache_quantization_factor(kv_cache_quantization) / KV_CACHE_BASELINE_FACTOR
    kv_cache = (
        params
        * KV_CACHE_GB_PER_BILLION_PARAMS
        * (context_length / KV_CACHE_REFERENCE_CONTEXT)
        * batch_size
        * kv_factor
    )
    if inference_mode == InferenceMode.BULK:
        kv_cache *= BULK_KV_CACHE_MULTIPLIER

    overhead = BASE_OVERHEAD_GB + model_weights * OVERHEAD_FACTOR
    total = model_weights + kv_cache + overhead

    return VRAMBreakdown(
        model_weights_gb=_round(model_weights, 2),
        kv_cache_gb=_round(kv_cache, 2),
        overhead_gb=_round(overhead, 2),
        total_gb=_round(total, 2),
    )


def find_gpu_profile(gpu_vram_gb: float) -> GPUProfile:
    """Return the profile with exactly this capacity, or the first profile."""
    for profile in GPU_PROFILES:
        if profile.vram_gb == gpu_vram_gb:
            return profile
    logger.debug("No GPU profile with %sGB, falling back to %s", gpu_vram_gb, GPU_PROFILES[0].name)
    return GPU_PROFILES[0]


def calculate_performance(
    params: float,
    model_quantization: Union[ModelQuantization, str],
    gpu_vram_gb: float
) -> PerformanceEstimate:
    """
    Estimate tokens/second for memory-bandwidth-bound generation.

    Every generated token reads all weights once, so the theoretical rate is
    bandwidth / model bytes. That figure is derated by EFFICIENCY_FACTOR.
    """
    gpu = find_gpu_profile(gpu_vram_gb)
    bytes_per_token = params * 1e9 * get_quantization_factor(model_quantization)
    theoretical_tokens_per_second = (gpu.bandwidth_gbs * 1e9) / bytes_per_token
    tokens_per_second = theoretical_tokens_per_second * EFFICIENCY_FACTOR
    return PerformanceEstimate(tokens_per_second=_round(tokens_per_second, 1))


def size_hardware(
    total_vram_gb: float,
    memory_mode: Union[MemoryMode, str],
    gpu_vram_gb: float,
    system_memory_gb: float
) -> HardwareSizing:
    """
    Decide the GPU count (discrete) or whether the model fits (unified).

    Args:
        total_vram_gb: Total VRAM required in GB
        memory_mode: Discrete GPU or unified memory
        gpu_vram_gb: VRAM per GPU in discrete mode
        system_memory_gb: Shared memory pool in unified mode

    Returns:
        HardwareSizing; gpus_required is GPUS_UNBOUNDED above MAX_GPUS and
        0 in unified mode
    """
    system_ram_needed = max(MIN_SYSTEM_RAM_GB, total_vram_gb * SYSTEM_RAM_FACTOR)

    if memory_mode == MemoryMode.DISCRETE_GPU:
        ratio = total_vram_gb / gpu_vram_gb
        # A vanishing GPU capacity overflows the ratio to inf
        gpus_required = math.ceil(ratio) if math.isfinite(ratio) else MAX_GPUS + 1
        if gpus_required == 1:
            gpu_setup = f"Single {_format_gb(gpu_vram_gb)}GB GPU"
        elif gpus_required <= MAX_GPUS:
            gpu_setup = f"{gpus_required}x {_format_gb(gpu_vram_gb)}GB GPUs"
        else:
            gpu_setup = f"> {MAX_GPUS} GPUs"
            gpus_required = GPUS_UNBOUNDED
        return HardwareSizing(
            gpu_setup=gpu_setup,
            gpus_required=gpus_required,
            fits_unified=False,
            system_ram_needed_gb=system_ram_needed,
        )

    fits_unified = system_memory_gb >= total_vram_gb
    verb = "Fits in" if fits_unified else "Exceeds"
    return HardwareSizing(
        gpu_setup=f"{verb} {_format_gb(system_memory_gb)}GB RAM",
        gpus_required=0,
        fits_unified=fits_unified,
        system_ram_needed_gb=system_ram_needed,
    )


def calculate_cloud_cost(
    vram_needed_gb: float,
    gpus_required: Union[int, str]
) -> Optional[CloudCostEstimate]:
    """
    Pick the cheapest cloud instance that can hold the model.

    Multi-GPU requirements are matched against an 8-GPU node of the
    instance's GPU, so the catalog VRAM is scaled by CLOUD_NODE_GPUS before
    filtering, and the hourly price is multiplied by the GPU count.

    Args:
        vram_needed_gb: Total VRAM required in GB
        gpus_required: GPU count, 0 for unified memory, or GPUS_UNBOUNDED

    Returns:
        CloudCostEstimate, or None when unbounded or nothing in the catalog fits
    """
    if gpus_required == GPUS_UNBOUNDED:
        return None

    multi_gpu = gpus_required > 1
    node_gpus = CLOUD_NODE_GPUS if multi_gpu else 1
    candidates = [
        instance for instance in CLOUD_INSTANCES
        if instance.vram_gb * node_gpus >= vram_needed_gb
    ]
    if not candidates:
        logger.debug("No cloud instance offers %sGB", vram_needed_gb)
        return None

    # min() keeps the first of equally priced instances
    cheapest = min(candidates, key=lambda instance: instance.hourly_cost)
    billed_gpus = gpus_required if multi_gpu else 1
    return CloudCostEstimate(
        provider=cheapest.provider,
        instance=cheapest.instance,
        gpu=cheapest.gpu,
        monthly_cost=_round(cheapest.hourly_cost * billed_gpus * HOURS_PER_MONTH, 0),
    )


def calculate_hardware_recommendation(config: CalculationConfig) -> Recommendation:
    """
    Build the full hardware recommendation for the given configuration.

    This is the main entry point for estimation.

    Args:
        config: Complete calculation configuration

    Returns:
        Recommendation aggregating VRAM, sizing, performance and cloud cost
    """
    # 1. VRAM
    vram_needed = calculate_vram_usage(
        config.params,
        config.model_quantization,
        config.context_length,
        config.kv_cache_quantization,
        config.inference_mode,
        config.batch_size
    )

    # 2. Throughput
    performance = calculate_performance(
        config.params,
        config.model_quantization,
        config.gpu_vram_gb
    )

    # 3. GPU count / unified fit
    sizing = size_hardware(
        vram_needed.total_gb,
        config.memory_mode,
        config.gpu_vram_gb,
        config.system_memory_gb
    )

    # 4. Cloud cost
    cloud_cost = calculate_cloud_cost(vram_needed.total_gb, sizing.gpus_required)

    return Recommendation(
        gpu_setup=sizing.gpu_setup,
        vram_needed=vram_needed,
        fits_unified=sizing.fits_unified,
        system_ram_needed_gb=sizing.system_ram_needed_gb,
        gpus_required=sizing.gpus_required,
        performance=performance,
        cloud_cost=cloud_cost,
        on_disk_size_gb=calculate_on_disk_size(config.params, config.model_quantization),
    )


estimate = calculate_hardware_recommendation
