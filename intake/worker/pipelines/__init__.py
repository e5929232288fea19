"""
Worker pipelines.

- ImagePipeline: fetch -> analyze -> decide -> write back for one job
"""

from intake.worker.pipelines.image_pipeline import ImagePipeline, PipelineResult

__all__ = ["ImagePipeline", "PipelineResult"]
