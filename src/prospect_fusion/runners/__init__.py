from prospect_fusion.runners.local import LocalFusionPipeline
from prospect_fusion.runners.orchestrated import AsyncFusionPipeline

__all__ = ["LocalFusionPipeline", "AsyncFusionPipeline"]
