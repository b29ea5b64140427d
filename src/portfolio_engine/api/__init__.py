"""
FastAPI REST API for the Portfolio Discovery Engine

Provides REST endpoints to:
- List portfolios sorted by units, buildings or value
- Fetch a portfolio by slug or by member building
- Trigger a discovery run for a bounding box
- Health checks
"""
