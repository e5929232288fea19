"""
Intake Worker

Background processing of uploaded images.

Components:
===========
- poller.WorkerLoop: Claims jobs and dispatches them with bounded concurrency
- pipelines.image_pipeline.ImagePipeline: Handles one job end to end
- health: HTTP health endpoint for the worker process
- main: Process entry point (intake-worker)
"""
