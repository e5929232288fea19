"""
Adapters Package

External service integrations.

Contents:
=========
- image_fetcher: Downloads stored images over HTTP (httpx)
- vision_adapter: Google Cloud Vision signals behind the VisionSignals protocol

Note: Database access is handled by shared/db/session.py using async SQLAlchemy.

Usage:
======
    from intake.shared.adapters.image_fetcher import ImageFetcher
    from intake.shared.adapters.vision_adapter import GoogleVisionAdapter, collect_signals
"""
