"""
HTTP layer of the knowledge portal: FastAPI routers, request models,
bearer-token helpers, upload storage and the AI summary pipeline.
"""
