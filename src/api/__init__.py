"""FastAPI routes and endpoints.

Endpoints:
- GET /health: Service health status
- GET /ready: Readiness probe (search index built)
- GET /search: Fuzzy book search
- GET /search/suggestions: Autocomplete suggestions
"""
