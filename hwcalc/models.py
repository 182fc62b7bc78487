"""
Pydantic models for API request/response validation.
"""

from pydantic import BaseModel, Field
from typing import Optional, List, Union

from .calculator import (
    CalculationConfig,
    InferenceMode,
    KVCacheQuantization,
    MemoryMode,
    ModelQuantization,
    Recommendation,
)


class CalculationRequest(BaseModel):
    """Request model for a hardware estimate."""
    # Model settings
    params: float = Field(
        default=8,
        gt=0,
        allow_inf_nan=False,
        description="Model size in billions of parameters"
    )
    model_quantization: ModelQuantization = Field(
        default=ModelQuantization.Q4,
        description="Weight quantization type"
    )
    context_length: int = Field(
        default=8192,
        gt=0,
        le=16_777_216,
        description="Context length in tokens"
    )

    # KV cache / workload
    kv_cache_quantization: KVCacheQuantization = Field(
        default=KVCacheQuantization.Q8,
        description="KV cache quantization type"
    )
    inference_mode: InferenceMode = Field(
        default=InferenceMode.INCREMENTAL,
        description="Incremental generation or bulk (prefill-heavy) inference"
    )
    batch_size: int = Field(default=1, gt=0, le=4096, description="Batch size")

    # Hardware
    memory_mode: MemoryMode = Field(
        default=MemoryMode.DISCRETE_GPU,
        description="Discrete GPU or unified memory"
    )
    system_memory_gb: float = Field(
        default=128,
        gt=0,
        allow_inf_nan=False,
        description="System memory in GB (the shared pool in unified mode)"
    )
    gpu_vram_gb: float = Field(
        default=24,
        gt=0,
        allow_inf_nan=False,
        description="VRAM per GPU in GB"
    )

    class Config:
        protected_namespaces = ()
        json_schema_extra = {
            "example": {
                "params": 8,
                "model_quantization": "Q4",
                "context_length": 8192,
                "kv_cache_quantization": "Q8",
                "inference_mode": "incremental",
                "batch_size": 1,
                "memory_mode": "DISCRETE_GPU",
                "system_memory_gb": 128,
                "gpu_vram_gb": 24
            }
        }

    def to_config(self) -> CalculationConfig:
        """Convert to the engine's configuration."""
        return CalculationConfig(**self.model_dump())


class MemoryBreakdown(BaseModel):
    """Detailed memory breakdown."""
    model_weights_gb: float = Field(..., description="Memory for model weights in GB")
    kv_cache_gb: float = Field(..., description="Memory for KV cache in GB")
    overhead_gb: float = Field(..., description="Runtime overhead in GB")
    total_gb: float = Field(..., description="Total VRAM required in GB")

    class Config:
        protected_namespaces = ()


class PerformanceInfo(BaseModel):
    """Estimated generation speed."""
    tokens_per_second: float


class CloudCostInfo(BaseModel):
    """Cheapest suitable cloud instance."""
    provider: str
    instance: str
    gpu: str
    monthly_cost: float = Field(..., description="Monthly cost in USD")


class RecommendationResponse(BaseModel):
    """Response model for a hardware estimate."""
    gpu_setup: str = Field(..., description="Human-readable hardware setup")
    vram_needed: MemoryBreakdown
    fits_unified: bool = Field(..., description="Whether the model fits in unified memory")
    system_ram_needed_gb: float = Field(..., description="Recommended system RAM in GB")
    gpus_required: Union[int, str] = Field(
        ...,
        description="GPUs needed in discrete mode, 0 in unified mode, 'unbounded' above 8"
    )
    performance: PerformanceInfo
    cloud_cost: Optional[CloudCostInfo] = Field(
        default=None,
        description="Cheapest cloud option, null when none is available"
    )
    on_disk_size_gb: float = Field(..., description="Size of the model files in GB")

    # Input echo for reference
    gpu_name: str

    class Config:
        json_schema_extra = {
            "example": {
                "gpu_setup": "Single 24GB GPU",
                "vram_needed": {
                    "model_weights_gb": 4.0,
                    "kv_cache_gb": 5.6,
                    "overhead_gb": 1.2,
                    "total_gb": 10.8
                },
                "fits_unified": False,
                "system_ram_needed_gb": 8.0,
                "gpus_required": 1,
                "performance": {"tokens_per_second": 88.2},
                "cloud_cost": {
                    "provider": "AWS",
                    "instance": "g4dn.xlarge",
                    "gpu": "NVIDIA T4",
                    "monthly_cost": 384.0
                },
                "on_disk_size_gb": 4.0,
                "gpu_name": "NVIDIA RTX 4090"
            }
        }

    @classmethod
    def from_recommendation(
        cls,
        recommendation: Recommendation,
        gpu_name: str
    ) -> "RecommendationResponse":
        vram = recommendation.vram_needed
        cloud = recommendation.cloud_cost
        return cls(
            gpu_setup=recommendation.gpu_setup,
            vram_needed=MemoryBreakdown(
                model_weights_gb=vram.model_weights_gb,
                kv_cache_gb=vram.kv_cache_gb,
                overhead_gb=vram.overhead_gb,
                total_gb=vram.total_gb,
            ),
            fits_unified=recommendation.fits_unified,
            system_ram_needed_gb=recommendation.system_ram_needed_gb,
            gpus_required=recommendation.gpus_required,
            performance=PerformanceInfo(
                tokens_per_second=recommendation.performance.tokens_per_second
            ),
            cloud_cost=CloudCostInfo(
                provider=cloud.provider,
                instance=cloud.instance,
                gpu=cloud.gpu,
                monthly_cost=cloud.monthly_cost,
            ) if cloud else None,
            on_disk_size_gb=recommendation.on_disk_size_gb,
            gpu_name=gpu_name,
        )


class GPUInfo(BaseModel):
    """GPU profile from the catalog."""
    name: str
    vram_gb: float
    bandwidth_gbs: float


class CloudInstanceInfo(BaseModel):
    """Cloud instance from the catalog."""
    provider: str
    instance: str
    gpu: str
    vram_gb: float
    hourly_cost: float


class GPUsResponse(BaseModel):
    """Response for listing all GPUs."""
    gpus: List[GPUInfo]
    count: int


class CloudInstancesResponse(BaseModel):
    """Response for listing all cloud instances."""
    instances: List[CloudInstanceInfo]
    count: int


class QuantizationsResponse(BaseModel):
    """Bytes-per-parameter factors for each quantization type."""
    model: dict
    kv_cache: dict


class ShareResponse(BaseModel):
    """Compact query string for sharing a configuration."""
    query: str


class HealthResponse(BaseModel):
    """Health check response."""
    status: str = "healthy"
    version: str
