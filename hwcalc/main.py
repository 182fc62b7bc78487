"""
LLM Hardware Calculator API

FastAPI application providing REST endpoints for hardware estimation.
"""

import logging

from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware

from . import __version__
from .models import (
    CalculationRequest,
    RecommendationResponse,
    GPUInfo,
    CloudInstanceInfo,
    GPUsResponse,
    CloudInstancesResponse,
    QuantizationsResponse,
    ShareResponse,
    HealthResponse,
)
from .calculator import (
    CLOUD_INSTANCES,
    GPU_PROFILES,
    CalculationConfig,
    KVCacheQuantization,
    ModelQuantization,
    calculate_hardware_recommendation,
    find_gpu_profile,
    get_kv_cache_quantization_factor,
    get_quantization_factor,
)
from .settings import settings
from .share import ShareDecodeError, decode_config, encode_config

logger = logging.getLogger(__name__)

# Initialize FastAPI app
app = FastAPI(
    title="LLM Hardware Calculator API",
    description="Estimate VRAM, GPU count, throughput and cloud cost for LLM inference",
    version=__version__,
    docs_url="/api/docs",
    redoc_url="/api/redoc",
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def build_response(config: CalculationConfig) -> RecommendationResponse:
    """Run the estimate and wrap it for the API."""
    recommendation = calculate_hardware_recommendation(config)
    logger.info(
        "Estimated %sB %s: %sGB total, %s",
        config.params,
        config.model_quantization.value,
        recommendation.vram_needed.total_gb,
        recommendation.gpu_setup,
    )
    return RecommendationResponse.from_recommendation(
        recommendation,
        gpu_name=find_gpu_profile(config.gpu_vram_gb).name,
    )


@app.get("/api/health", response_model=HealthResponse, tags=["Health"])
async def health_check():
    """Health check endpoint."""
    return HealthResponse(status="healthy", version=__version__)


@app.get("/api/gpus", response_model=GPUsResponse, tags=["Data"])
async def list_gpus():
    """List the known GPU profiles."""
    gpus = [
        GPUInfo(name=gpu.name, vram_gb=gpu.vram_gb, bandwidth_gbs=gpu.bandwidth_gbs)
        for gpu in GPU_PROFILES
    ]
    return GPUsResponse(gpus=gpus, count=len(gpus))


@app.get("/api/cloud-instances", response_model=CloudInstancesResponse, tags=["Data"])
async def list_cloud_instances():
    """List the cloud instances used for cost estimates."""
    instances = [
        CloudInstanceInfo(
            provider=instance.provider,
            instance=instance.instance,
            gpu=instance.gpu,
            vram_gb=instance.vram_gb,
            hourly_cost=instance.hourly_cost,
        )
        for instance in CLOUD_INSTANCES
    ]
    return CloudInstancesResponse(instances=instances, count=len(instances))


@app.get("/api/quantizations", response_model=QuantizationsResponse, tags=["Data"])
async def list_quantizations():
    """Bytes-per-parameter factor of every supported quantization."""
    return QuantizationsResponse(
        model={q.value: get_quantization_factor(q) for q in ModelQuantization},
        kv_cache={q.value: get_kv_cache_quantization_factor(q) for q in KVCacheQuantization},
    )


@app.post("/api/calculate", response_model=RecommendationResponse, tags=["Calculation"])
async def calculate(request: CalculationRequest):
    """
    Estimate hardware requirements for the given configuration.

    This endpoint calculates:
    - VRAM breakdown (weights, KV cache, overhead)
    - GPU count, or whether the model fits in unified memory
    - Estimated tokens per second
    - Cheapest suitable cloud instance, if any
    """
    return build_response(request.to_config())


@app.get("/api/calculate", response_model=RecommendationResponse, tags=["Calculation"])
async def calculate_shared(request: Request):
    """Estimate from a share query string (see /api/share)."""
    try:
        config = decode_config(request.url.query)
    except ShareDecodeError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return build_response(config)


@app.post("/api/share", response_model=ShareResponse, tags=["Calculation"])
async def share(request: CalculationRequest):
    """Encode a configuration as a compact query string."""
    return ShareResponse(query=encode_config(request.to_config()))
