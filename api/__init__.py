"""
api - FastAPI backend for the Genshin Build Card.

Provides RESTful API endpoints for:
- Proxying Enka.Network showcase snapshots
- Normalizing a showcased character into a build card
- Scoring artifacts
"""

__version__ = "0.1.0"
