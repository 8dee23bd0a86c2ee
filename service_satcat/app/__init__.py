"""
Satellite catalog gateway service for Space-Track.

The gateway mirrors a subset of Space-Track for its clients:
- Session: one cookie-authenticated Space-Track session, renewed on 401
- Perturbation cache: per-object orbital elements with a 4 hour staleness window
- Catalog: in-memory snapshot of all tracked objects with exact and fuzzy search

Structure:
- app.main: FastAPI app, routes, and startup/shutdown wiring.
- app.adapters: Space-Track HTTP client.
- app.caching: Perturbation cache.
- app.catalog: Tracked object models, search ranking, snapshot store and refresher.
"""
